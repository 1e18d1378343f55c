"""
CLI exit codes and output.
"""
import pytest
from typer.testing import CliRunner

from luis_quickstart.cli import app

runner = CliRunner()

REQUIRED = ["AUTHORING_KEY", "AUTHORING_RESOURCE_NAME", "PREDICTION_RESOURCE_NAME", "PREDICTION_KEY"]


@pytest.fixture
def clean_env(monkeypatch):
    for key in REQUIRED:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def set_env(monkeypatch, env):
    for key, value in env.items():
        monkeypatch.setenv(key, value)


def test_run_without_configuration_exits_with_config_code(clean_env):
    result = runner.invoke(app, ["run"])
    assert result.exit_code == 2


def test_predict_without_configuration_exits_with_config_code(clean_env):
    result = runner.invoke(app, ["predict", "two pizzas please", "--app-id", "abc"])
    assert result.exit_code == 2


def test_config_show_masks_key(set_env):
    result = runner.invoke(app, ["config:show"])
    assert result.exit_code == 0
    assert "contoso-authoring.cognitiveservices.azure.com" in result.output
    assert "authoring-key-1234" not in result.output


def test_predict_requires_app_id(set_env):
    result = runner.invoke(app, ["predict", "two pizzas please"])
    assert result.exit_code != 0


def test_run_interrupted_exits_with_interrupt_code(monkeypatch):
    async def interrupted(**kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr("luis_quickstart.cli.app_main", interrupted)
    result = runner.invoke(app, ["run"])

    assert result.exit_code == 130
    assert "Interrupted" in result.output
    assert not isinstance(result.exception, KeyboardInterrupt)
