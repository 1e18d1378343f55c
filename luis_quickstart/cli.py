import asyncio
import json
import typer

from luis_quickstart.app import main as app_main, predict as app_predict, training_status, report_error, setup_logging
from luis_quickstart.core.config import Config
from luis_quickstart.core.errors import INTERRUPTED_EXIT_CODE, QuickstartError
from luis_quickstart.core.luis.base import remote_operation

app = typer.Typer(help="LUIS Pizza Quickstart CLI")


def _load_config() -> Config:
    try:
        return Config.from_env()
    except QuickstartError as e:
        raise typer.Exit(code=report_error(e))


@app.command("run")
def run_quickstart(
    poll_interval: float = typer.Option(None, "--poll-interval", "-i", help="Seconds between training status polls"),
    timeout: float = typer.Option(None, "--timeout", "-t", help="Give up on training after this many seconds"),
    show_config: bool = typer.Option(False, "--show-config", help="Print configuration before running"),
):
    """Create, train, publish and query the pizza app end to end."""
    try:
        code = asyncio.run(app_main(poll_interval=poll_interval, timeout=timeout, show_config=show_config))
    except KeyboardInterrupt:
        # asyncio.run has already cancelled the run and closed both clients
        typer.echo("Interrupted; resources created so far are left in place.", err=True)
        raise typer.Exit(code=INTERRUPTED_EXIT_CODE)
    raise typer.Exit(code=code)


@app.command("predict")
def predict(
    query: str,
    app_id: str = typer.Option(..., "--app-id", "-a", help="Published application id"),
    slot: str = typer.Option("Production", "--slot", "-s"),
):
    """Query a published app and print the prediction JSON."""
    setup_logging()
    config = _load_config()

    async def _predict():
        with remote_operation("predict", {"app_id": app_id, "slot": slot}):
            return await app_predict(query, app_id, slot=slot, config=config)

    try:
        prediction = asyncio.run(_predict())
    except QuickstartError as e:
        raise typer.Exit(code=report_error(e))
    typer.echo(json.dumps(prediction, indent=2))


@app.command("train:status")
def train_status(
    app_id: str = typer.Option(..., "--app-id", "-a"),
    version: str = typer.Option(None, "--version", "-v", help="Version id (defaults to LUIS_VERSION_ID)"),
):
    """Print one training status fetch, as model counts per status."""
    setup_logging()
    config = _load_config()

    async def _status():
        with remote_operation("train_status", {"app_id": app_id}):
            return await training_status(app_id, version, config=config)

    try:
        counts = asyncio.run(_status())
    except QuickstartError as e:
        raise typer.Exit(code=report_error(e))
    for status, count in sorted(counts.items()):
        typer.echo(f"{status:<12} {count}")


@app.command("config:show")
def config_show():
    """Print the effective configuration (keys masked)."""
    setup_logging()
    _load_config().print_config()


if __name__ == "__main__":
    app()
