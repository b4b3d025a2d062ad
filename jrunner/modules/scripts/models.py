"""Typed configuration documents for manifest, custom and override scripts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_COLUMN_ID = "custom"
DEFAULT_COLUMN_NAME = "custom scripts"
COMMAND_SEPARATOR = " && "


def join_commands(command: str | Sequence[str]) -> str:
    """Collapse a list of command steps into one shell command line."""
    if isinstance(command, str):
        return command.strip()
    return COMMAND_SEPARATOR.join(step.strip() for step in command if step and step.strip())


def clean_steps(value: Any) -> list[str]:
    """Normalize a command value (string or list) into its non-blank steps."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [str(step).strip() for step in value if str(step).strip()]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Column(CamelModel):
    id: str
    name: str


def default_column() -> Column:
    return Column(id=DEFAULT_COLUMN_ID, name=DEFAULT_COLUMN_NAME)


class ScriptDefinition(CamelModel):
    name: str
    command: list[str] = []
    description: str = ""
    color: Optional[str] = None
    column_id: str = DEFAULT_COLUMN_ID
    hidden: bool = False

    @field_validator("command", mode="before")
    @classmethod
    def _coerce_command(cls, value: Any) -> list[str]:
        return clean_steps(value)

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("column_id", mode="before")
    @classmethod
    def _coerce_column(cls, value: Any) -> str:
        return str(value) if value else DEFAULT_COLUMN_ID


class OverrideEntry(CamelModel):
    name: str
    hidden: Optional[bool] = None
    description: Optional[str] = None
    command: Optional[list[str]] = None
    color: Optional[str] = None
    column_id: Optional[str] = None

    @field_validator("command", mode="before")
    @classmethod
    def _coerce_command(cls, value: Any) -> Optional[list[str]]:
        if value is None:
            return None
        return clean_steps(value)


class CustomConfig(CamelModel):
    """Contents of the shared custom-script configuration file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    scripts: list[ScriptDefinition] = []
    columns: list[Column] = []

    def normalized(self) -> "CustomConfig":
        """Return a copy whose scripts only reference existing columns."""
        columns = list(self.columns) or [default_column()]
        known = {column.id for column in columns}
        scripts = [
            script if script.column_id in known else script.model_copy(update={"column_id": DEFAULT_COLUMN_ID})
            for script in self.scripts
        ]
        if DEFAULT_COLUMN_ID not in known and any(s.column_id == DEFAULT_COLUMN_ID for s in scripts):
            columns.insert(0, default_column())
        return self.model_copy(update={"scripts": scripts, "columns": columns})

    def find_script(self, name: str) -> Optional[ScriptDefinition]:
        return next((script for script in self.scripts if script.name == name), None)

    def column_ids(self) -> set[str]:
        return {column.id for column in self.columns}


class OverrideConfig(CamelModel):
    """Contents of the personal, version-control-ignored override file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    scripts: list[OverrideEntry] = []
    columns: list[Column] = []

    def find(self, name: str) -> Optional[OverrideEntry]:
        return next((entry for entry in self.scripts if entry.name == name), None)


@dataclass(slots=True)
class Manifest:
    """The project manifest; only ``scripts`` is ever rewritten."""

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def scripts(self) -> dict[str, str]:
        raw = self.data.get("scripts")
        if not isinstance(raw, dict):
            return {}
        return {str(name): str(command) for name, command in raw.items()}

    def with_scripts(self, scripts: dict[str, str]) -> "Manifest":
        data = dict(self.data)
        data["scripts"] = scripts
        return Manifest(data)

    @property
    def meta(self) -> "PackageMeta":
        return PackageMeta(
            name=str(self.data.get("name") or ""),
            version=str(self.data.get("version") or ""),
        )


class PackageMeta(CamelModel):
    name: str = ""
    version: str = ""


class ScriptsView(CamelModel):
    """Merged view of manifest scripts, custom scripts and overrides."""

    package_scripts: dict[str, str]
    package_meta: PackageMeta
    custom_scripts: list[ScriptDefinition]
    initialized: bool
    overrides_present: bool
    hidden_scripts: list[str]
    columns: list[Column]


@dataclass(slots=True)
class ScriptInput:
    name: str
    command: list[str]
    description: str = ""
    color: Optional[str] = None
    column_id: Optional[str] = None
