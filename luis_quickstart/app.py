import asyncio
import json
import logging
import sys
from typing import Any, Mapping, Optional

import httpx

from luis_quickstart.core.bus import Bus, Subscriber
from luis_quickstart.core.config import Config
from luis_quickstart.core.contracts import LabeledExampleBuilt, PredictionReceived, StepCompleted, TrainingPolled
from luis_quickstart.core.errors import QuickstartError
from luis_quickstart.core.orchestrator import Quickstart, QuickstartState
from luis_quickstart.core.training import summarize

logger = logging.getLogger("app")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="[%(levelname)s] %(name)s: %(message)s")


def attach_console(bus: Bus) -> list[tuple[str, Subscriber]]:
    """
    Print progress, the labeled example and the prediction as they happen.

    Returns the (topic, subscriber) pairs so the caller can detach them.
    """

    async def on_step(payload: dict):
        e = StepCompleted(**payload)
        print(f"[{e.index:>2}/{e.total}] {e.step} ({e.elapsed_s:.2f}s) {e.result or ''}".rstrip())

    async def on_example(payload: dict):
        e = LabeledExampleBuilt(**payload)
        print("Labeled Example Utterance:", json.dumps(e.example, indent=2))

    async def on_poll(payload: dict):
        e = TrainingPolled(**payload)
        print(f"      training poll #{e.attempt}: {e.statuses}")

    async def on_prediction(payload: dict):
        e = PredictionReceived(**payload)
        print(json.dumps(e.prediction, indent=2))

    subscriptions = [
        ("quickstart.step.completed", on_step),
        ("quickstart.example.built", on_example),
        ("quickstart.training.polled", on_poll),
        ("quickstart.prediction", on_prediction),
    ]
    for topic, fn in subscriptions:
        bus.subscribe(topic, fn)
    return subscriptions


async def run_quickstart(
    environ: Optional[Mapping[str, str]] = None,
    bus: Optional[Bus] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    config: Optional[Config] = None,
) -> QuickstartState:
    """
    Load configuration, build both clients and run every quickstart step.

    Configuration is validated before any client exists, so a bad
    environment never reaches the network.

    Raises:
        QuickstartError: Any subclass, unchanged
    """
    if config is None:
        config = Config.from_env(environ)
    bus = bus or Bus()
    async with config.get_authoring_client(transport) as authoring, config.get_runtime_client(transport) as runtime:
        return await Quickstart(authoring, runtime, bus, config).run()


async def predict(
    query: str,
    app_id: str,
    slot: str = "Production",
    config: Optional[Config] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[str, Any]:
    """One prediction against an already published app."""
    config = config or Config.from_env()
    async with config.get_runtime_client(transport) as runtime:
        response = await runtime.prediction.get_slot_prediction(app_id, slot, query, show_all_intents=True)
    return (response or {}).get("prediction") or {}


async def training_status(
    app_id: str,
    version_id: Optional[str] = None,
    config: Optional[Config] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict[str, int]:
    """Fetch training status once and count models per status."""
    config = config or Config.from_env()
    async with config.get_authoring_client(transport) as authoring:
        statuses = await authoring.train.get_status(app_id, version_id or config.version_id)
    return summarize(statuses)


def report_error(e: QuickstartError) -> int:
    """Log one diagnostic line for a failed run and return its exit code."""
    logger.error("%s: %s", type(e).__name__, e)
    if e.__cause__ is not None:
        logger.debug("caused by", exc_info=e.__cause__)
    return e.exit_code


async def main(
    environ: Optional[Mapping[str, str]] = None,
    poll_interval: Optional[float] = None,
    timeout: Optional[float] = None,
    show_config: bool = False,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    bus: Optional[Bus] = None,
) -> int:
    """
    Run the quickstart with console output and return a process exit code.

    A caller-supplied bus keeps its own subscribers; the console printers
    are detached from it again when the run ends.
    """
    setup_logging()
    try:
        config = Config.from_env(environ)
    except QuickstartError as e:
        return report_error(e)
    logging.getLogger().setLevel(getattr(logging, config.log_level, logging.INFO))

    if poll_interval is not None:
        config.poll_interval = poll_interval
    if timeout is not None:
        config.training_timeout = timeout
    if show_config:
        config.print_config()

    bus = bus or Bus()
    subscriptions = attach_console(bus)
    try:
        await run_quickstart(bus=bus, config=config, transport=transport)
    except QuickstartError as e:
        return report_error(e)
    finally:
        for topic, fn in subscriptions:
            bus.unsubscribe(topic, fn)
    print("Done")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
