"""
Training status polling.

After a version is queued for training, the service reports one status
record per model. The poll waits (with a sleep between fetches) until every
record says Success, fails fast if any says Fail, and gives up after a
deadline.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Optional

from .errors import TrainingFailedError, TrainingTimeoutError
from .luis.types import ModelTrainingInfo

logger = logging.getLogger("training")

SUCCESS_STATUSES = frozenset({"Success"})
FAILED_STATUSES = frozenset({"Fail", "Failed"})


class TrainingState(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


def classify_status(status: str) -> TrainingState:
    """Queued, InProgress, UpToDate and anything unrecognised count as pending."""
    if status in SUCCESS_STATUSES:
        return TrainingState.SUCCESS
    if status in FAILED_STATUSES:
        return TrainingState.FAILED
    return TrainingState.PENDING


def summarize(statuses: list[ModelTrainingInfo]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for info in statuses:
        counts[info.status] = counts.get(info.status, 0) + 1
    return counts


async def wait_for_training(
    train,
    app_id: str,
    version_id: str,
    interval: float = 1.0,
    timeout: float = 600.0,
    on_poll: Optional[Any] = None,
) -> list[ModelTrainingInfo]:
    """
    Poll training status until every model reports Success.

    Args:
        train: Object with `async get_status(app_id, version_id)`
        app_id: Application id
        version_id: Version being trained
        interval: Seconds to sleep between polls
        timeout: Overall deadline in seconds
        on_poll: Optional async callback receiving (attempt, statuses)

    Returns:
        The status list from the fetch that reported all-Success

    Raises:
        TrainingFailedError: If any model reports a failure status
        TrainingTimeoutError: If the deadline elapses first
    """
    last: list[ModelTrainingInfo] = []

    async def _poll() -> list[ModelTrainingInfo]:
        nonlocal last
        attempt = 0
        while True:
            attempt += 1
            statuses = await train.get_status(app_id, version_id)
            last = statuses
            states = [classify_status(info.status) for info in statuses]
            logger.info("Training poll #%d: %s", attempt, summarize(statuses) or "no models reported")
            if on_poll is not None:
                await on_poll(attempt, statuses)

            failed = [info for info, state in zip(statuses, states) if state is TrainingState.FAILED]
            if failed:
                raise TrainingFailedError(failed, context={"app_id": app_id, "version": version_id})

            # an empty list means training has not reported anything yet
            if states and all(state is TrainingState.SUCCESS for state in states):
                logger.info("Training complete after %d poll(s)", attempt)
                return statuses

            await asyncio.sleep(interval)

    try:
        return await asyncio.wait_for(_poll(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Training still pending after %.1fs: %s", timeout, summarize(last))
        raise TrainingTimeoutError(
            timeout, last_statuses=last, context={"app_id": app_id, "version": version_id}
        ) from None
