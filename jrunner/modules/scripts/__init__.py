"""Script board configuration: manifest scripts, custom scripts, overrides and columns."""

from .exceptions import (
    ColumnNotFoundError,
    ConfigPersistenceError,
    ConfigReadError,
    ScriptConfigError,
    ScriptNotFoundError,
    ScriptValidationError,
)
from .models import (
    DEFAULT_COLUMN_ID,
    Column,
    CustomConfig,
    OverrideConfig,
    OverrideEntry,
    ScriptDefinition,
    ScriptInput,
    ScriptsView,
    join_commands,
)
from .repository import ScriptConfigRepository
from .service import ScriptConfigService

__all__ = [
    "DEFAULT_COLUMN_ID",
    "Column",
    "ColumnNotFoundError",
    "ConfigPersistenceError",
    "ConfigReadError",
    "CustomConfig",
    "OverrideConfig",
    "OverrideEntry",
    "ScriptConfigError",
    "ScriptConfigRepository",
    "ScriptConfigService",
    "ScriptDefinition",
    "ScriptInput",
    "ScriptNotFoundError",
    "ScriptValidationError",
    "ScriptsView",
    "join_commands",
]
