"""Run domain specific exceptions."""


class RunError(Exception):
    """Base class for run related domain errors."""


class RunValidationError(RunError):
    """Raised when a run request carries an empty or malformed command."""


class RunNotFoundError(RunError):
    """Raised when the requested run id is unknown."""


class RunNotRunningError(RunNotFoundError):
    """Raised when stopping a run that has no live process anymore."""
