"""
Error taxonomy for the quickstart.

Every failure the run can end in is a QuickstartError subclass. Each class
carries the process exit code the CLI reports, so callers can tell a bad
environment apart from a rejected request or a failed training job.
"""

from typing import Any, Optional

# conventional shell status for a run stopped with Ctrl-C (128 + SIGINT)
INTERRUPTED_EXIT_CODE = 130


class QuickstartError(Exception):
    """Base class. `step` names the pipeline step that failed (if any)."""

    exit_code: int = 1

    def __init__(self, message: str, step: Optional[str] = None, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.step = step
        self.context: dict[str, Any] = dict(context or {})

    def __str__(self) -> str:
        parts = []
        if self.step:
            parts.append(f"[{self.step}]")
        parts.append(self.message)
        if self.context:
            parts.append("(" + ", ".join(f"{k}={v}" for k, v in self.context.items()) + ")")
        return " ".join(parts)


class ConfigurationError(QuickstartError):
    """Missing or invalid environment configuration."""

    exit_code = 2

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        super().__init__(message)
        self.missing = list(missing or [])


class RemoteOperationError(QuickstartError):
    """An HTTP call to the authoring or prediction service failed."""

    exit_code = 3

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, step=step, context=context)
        self.status_code = status_code


class EntityResolutionError(QuickstartError):
    """A child or grandchild name could not be found in an entity tree."""

    exit_code = 4

    def __init__(self, missing_name: str, path: list[str]):
        super().__init__(
            f"entity path not found: no {missing_name!r} under {' -> '.join(path)!r}",
            context={"missing": missing_name},
        )
        self.missing_name = missing_name
        self.path = list(path)


class TrainingTimeoutError(QuickstartError):
    """Training did not reach all-Success before the deadline."""

    exit_code = 5

    def __init__(self, timeout: float, last_statuses: Optional[list] = None, context: Optional[dict[str, Any]] = None):
        super().__init__(f"training did not finish within {timeout:.1f}s", context=context)
        self.timeout = timeout
        self.last_statuses = list(last_statuses or [])


class TrainingFailedError(QuickstartError):
    """At least one model reported a terminal failure status."""

    exit_code = 6

    def __init__(self, failed: list, context: Optional[dict[str, Any]] = None):
        summary = ", ".join(
            f"{m.model_id}: {m.failure_reason or m.status}" for m in failed
        )
        super().__init__(f"training failed for {len(failed)} model(s): {summary}", context=context)
        self.failed = list(failed)
