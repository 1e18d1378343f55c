"""
Configuration management for the LUIS quickstart.

Reads the authoring key and the two Cognitive Services resource names from
environment variables (or a .env file) and builds the authoring and
prediction clients from them.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import httpx
from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger("config")

# Load .env file if available
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
    logger.debug("Loaded .env file from %s", env_path)
else:
    # Also try loading from current directory
    load_dotenv()

ENDPOINT_TEMPLATE = "https://{resource}.cognitiveservices.azure.com/"

REQUIRED_VARS = ("AUTHORING_KEY", "AUTHORING_RESOURCE_NAME", "PREDICTION_RESOURCE_NAME")


def endpoint_for(resource_name: str) -> str:
    """Base HTTPS endpoint of a Cognitive Services resource."""
    return ENDPOINT_TEMPLATE.format(resource=resource_name)


def _mask(key: str) -> str:
    if len(key) <= 4:
        return "****"
    return "*" * (len(key) - 4) + key[-4:]


@dataclass(slots=True)
class Config:
    """
    Validated quickstart configuration.

    Build it with Config.from_env(); the constructor does no validation.
    """

    authoring_key: str
    authoring_resource_name: str
    prediction_resource_name: str
    prediction_key: Optional[str] = None

    app_name: str = "Contoso Pizza Company"
    version_id: str = "0.1"
    culture: str = "en-us"

    poll_interval: float = 1.0
    training_timeout: float = 600.0
    http_timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ (tests)

        Returns:
            Config instance

        Raises:
            ConfigurationError: If a required variable is missing or blank,
                or a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_VARS if not (env.get(name) or "").strip()]
        if missing:
            raise ConfigurationError(
                "missing required environment variable(s): " + ", ".join(missing),
                missing=missing,
            )

        def _float(name: str, default: str) -> float:
            raw = env.get(name, default)
            try:
                value = float(raw)
            except ValueError:
                raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {raw!r}")
            return value

        config = cls(
            authoring_key=env["AUTHORING_KEY"].strip(),
            authoring_resource_name=env["AUTHORING_RESOURCE_NAME"].strip(),
            prediction_resource_name=env["PREDICTION_RESOURCE_NAME"].strip(),
            prediction_key=(env.get("PREDICTION_KEY") or "").strip() or None,
            app_name=env.get("LUIS_APP_NAME", "Contoso Pizza Company"),
            version_id=env.get("LUIS_VERSION_ID", "0.1"),
            culture=env.get("LUIS_CULTURE", "en-us"),
            poll_interval=_float("LUIS_POLL_INTERVAL", "1.0"),
            training_timeout=_float("LUIS_TRAINING_TIMEOUT", "600"),
            http_timeout=_float("LUIS_HTTP_TIMEOUT", "30"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
        logger.debug(
            "Loaded config: authoring=%s prediction=%s app=%r version=%s",
            config.authoring_resource_name, config.prediction_resource_name,
            config.app_name, config.version_id,
        )
        return config

    @property
    def authoring_endpoint(self) -> str:
        return endpoint_for(self.authoring_resource_name)

    @property
    def prediction_endpoint(self) -> str:
        return endpoint_for(self.prediction_resource_name)

    def get_authoring_client(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Build the authoring client.

        Returns:
            AuthoringClient bound to the authoring endpoint
        """
        from luis_quickstart.core.luis.authoring import AuthoringClient
        logger.info("Using authoring endpoint: %s (timeout: %.1fs)", self.authoring_endpoint, self.http_timeout)
        return AuthoringClient(
            endpoint=self.authoring_endpoint,
            key=self.authoring_key,
            timeout=self.http_timeout,
            transport=transport,
        )

    def get_runtime_client(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Build the prediction (runtime) client.

        The authoring key is used unless PREDICTION_KEY is set.

        Returns:
            RuntimeClient bound to the prediction endpoint
        """
        from luis_quickstart.core.luis.runtime import RuntimeClient
        logger.info("Using prediction endpoint: %s (timeout: %.1fs)", self.prediction_endpoint, self.http_timeout)
        return RuntimeClient(
            endpoint=self.prediction_endpoint,
            key=self.prediction_key or self.authoring_key,
            timeout=self.http_timeout,
            transport=transport,
        )

    def print_config(self):
        """Print current configuration (keys masked)."""
        print("\nLUIS Quickstart Configuration:")
        print(f"  Authoring: {self.authoring_endpoint}")
        print(f"    Key: {_mask(self.authoring_key)}")
        print(f"  Prediction: {self.prediction_endpoint}")
        print(f"    Key: {_mask(self.prediction_key or self.authoring_key)}"
              f"{'' if self.prediction_key else ' (authoring key)'}")
        print(f"  App: {self.app_name} (version {self.version_id}, {self.culture})")
        print(f"  Training poll: every {self.poll_interval}s, timeout {self.training_timeout}s")
        print(f"  HTTP timeout: {self.http_timeout}s")
        print()
