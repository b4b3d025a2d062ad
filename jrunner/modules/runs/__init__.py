"""Run engine: registry, process runner and per-run output broadcasting."""

from .broadcaster import RunChannel, Subscription
from .exceptions import RunError, RunNotFoundError, RunNotRunningError, RunValidationError
from .models import LogEntry, RunEvent, RunRecord, RunStatus
from .registry import RunRegistry
from .runner import ProcessRunner

__all__ = [
    "LogEntry",
    "ProcessRunner",
    "RunChannel",
    "RunError",
    "RunEvent",
    "RunNotFoundError",
    "RunNotRunningError",
    "RunRecord",
    "RunRegistry",
    "RunStatus",
    "RunValidationError",
    "Subscription",
]
