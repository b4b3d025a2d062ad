"""Script configuration specific exceptions."""


class ScriptConfigError(Exception):
    """Base class for script configuration errors."""


class ScriptValidationError(ScriptConfigError):
    """Raised when a script or column payload is rejected before persistence."""


class ScriptNotFoundError(ScriptConfigError):
    """Raised when the requested script does not exist in the selected source."""


class ColumnNotFoundError(ScriptConfigError):
    """Raised when the requested column id does not exist."""


class ConfigReadError(ScriptConfigError):
    """Raised when a required file is missing or a configuration file cannot be parsed."""


class ConfigPersistenceError(ScriptConfigError):
    """Raised when a configuration file could not be written."""
