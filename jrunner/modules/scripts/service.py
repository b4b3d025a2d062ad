"""Application service merging and editing manifest, custom and override scripts."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from jrunner.core.config import Settings

from .exceptions import ColumnNotFoundError, ScriptNotFoundError, ScriptValidationError
from .models import (
    DEFAULT_COLUMN_ID,
    Column,
    CustomConfig,
    OverrideConfig,
    OverrideEntry,
    ScriptDefinition,
    ScriptInput,
    ScriptsView,
    clean_steps,
    join_commands,
)
from .repository import ScriptConfigRepository

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    return _SLUG_PATTERN.sub("-", name.lower()).strip("-") or "column"


def unique_column_id(name: str, existing: Iterable[str]) -> str:
    """Derive a column id from ``name``, adding ``-2``, ``-3``... on collision."""
    taken = set(existing)
    base = slugify(name)
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def apply_override(script: ScriptDefinition, entry: Optional[OverrideEntry]) -> ScriptDefinition:
    """Layer a personal override on top of a shared script definition."""
    if entry is None:
        return script
    update: dict[str, object] = {"hidden": bool(entry.hidden) or script.hidden}
    if entry.description:
        update["description"] = entry.description
    if entry.command:
        update["command"] = list(entry.command)
    if entry.color:
        update["color"] = entry.color
    if entry.column_id:
        update["column_id"] = entry.column_id
    return script.model_copy(update=update)


def _require_name(name: Optional[str]) -> str:
    stripped = (name or "").strip()
    if not stripped:
        raise ScriptValidationError("name is required")
    return stripped


def _require_command(command: object) -> list[str]:
    steps = clean_steps(command)
    if not steps:
        raise ScriptValidationError("at least one command is required")
    return steps


class ScriptConfigService:
    """Single source of truth for the script board configuration."""

    def __init__(self, repository: ScriptConfigRepository) -> None:
        self._repository = repository

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScriptConfigService":
        return cls(
            ScriptConfigRepository(
                manifest_path=settings.manifest_path,
                config_path=settings.config_path,
                overrides_path=settings.overrides_path,
                gitignore_path=settings.gitignore_path,
            )
        )

    # -- merged view -------------------------------------------------------

    def load_scripts(self) -> ScriptsView:
        manifest = self._repository.read_manifest()
        stored = self._repository.read_config()
        config = stored or CustomConfig().normalized()
        overrides = self._repository.read_overrides()
        layer = overrides or OverrideConfig()

        merged = CustomConfig(
            scripts=[apply_override(script, layer.find(script.name)) for script in config.scripts],
            columns=layer.columns or config.columns,
        ).normalized()

        hidden: list[str] = []
        for name in [s.name for s in merged.scripts if s.hidden] + [e.name for e in layer.scripts if e.hidden]:
            if name not in hidden:
                hidden.append(name)

        return ScriptsView(
            package_scripts=manifest.scripts,
            package_meta=manifest.meta,
            custom_scripts=merged.scripts,
            initialized=stored is not None,
            overrides_present=overrides is not None,
            hidden_scripts=hidden,
            columns=merged.columns,
        )

    def initialize(self) -> bool:
        """Create the custom-script config if missing; return whether it was created."""
        if self._repository.config_exists():
            return False
        self._repository.write_config(CustomConfig().normalized())
        logger.info("Initialized %s", self._repository.config_path)
        return True

    # -- custom scripts ----------------------------------------------------

    def list_custom_scripts(self) -> list[ScriptDefinition]:
        return self._load_config().scripts

    def create_custom_script(self, payload: ScriptInput) -> list[ScriptDefinition]:
        name = _require_name(payload.name)
        command = _require_command(payload.command)
        config = self._load_config()
        if config.find_script(name) is not None:
            raise ScriptValidationError(f"custom script '{name}' already exists")

        script = ScriptDefinition(
            name=name,
            command=command,
            description=payload.description or "",
            color=payload.color or None,
            column_id=self._resolve_column(config, payload.column_id),
        )
        saved = self._save_config(config.model_copy(update={"scripts": [*config.scripts, script]}))
        logger.info("Created custom script %s", name)
        return saved.scripts

    def update_custom_script(self, original_name: str, payload: ScriptInput) -> list[ScriptDefinition]:
        name = _require_name(payload.name)
        command = _require_command(payload.command)
        config = self._load_config()
        current = config.find_script(original_name)
        if current is None:
            raise ScriptNotFoundError(f"custom script '{original_name}' not found")
        if name != original_name and config.find_script(name) is not None:
            raise ScriptValidationError(f"custom script '{name}' already exists")

        updated = current.model_copy(
            update={
                "name": name,
                "command": command,
                "description": payload.description or "",
                "color": payload.color or None,
                "column_id": self._resolve_column(config, payload.column_id or current.column_id),
            }
        )
        scripts = [updated if script is current else script for script in config.scripts]
        saved = self._save_config(config.model_copy(update={"scripts": scripts}))
        logger.info("Updated custom script %s", name if name == original_name else f"{original_name} -> {name}")
        return saved.scripts

    def delete_custom_script(self, name: str) -> list[ScriptDefinition]:
        name = _require_name(name)
        config = self._load_config()
        if config.find_script(name) is None:
            raise ScriptNotFoundError(f"custom script '{name}' not found")
        scripts = [script for script in config.scripts if script.name != name]
        saved = self._save_config(config.model_copy(update={"scripts": scripts}))
        logger.info("Deleted custom script %s", name)
        return saved.scripts

    def arrange_custom_scripts(self, order: list[str], column_id_by_name: dict[str, str]) -> list[ScriptDefinition]:
        config = self._load_config()
        by_name = {script.name: script for script in config.scripts}
        ordered = [by_name[name] for name in dict.fromkeys(order) if name in by_name]
        ordered += [script for script in config.scripts if script.name not in order]
        scripts = [
            script.model_copy(update={"column_id": self._resolve_column(config, column_id_by_name[script.name])})
            if script.name in column_id_by_name
            else script
            for script in ordered
        ]
        return self._save_config(config.model_copy(update={"scripts": scripts})).scripts

    # -- manifest scripts --------------------------------------------------

    def save_package_script(self, name: str, command: object, original_name: Optional[str] = None) -> dict[str, str]:
        name = _require_name(name)
        line = join_commands(_require_command(command))
        original = (original_name or "").strip() or None

        manifest = self._repository.read_manifest()
        scripts = manifest.scripts
        if name in scripts and name != original:
            raise ScriptValidationError(f"package script '{name}' already exists")

        if original and original != name and original in scripts:
            scripts = {(name if key == original else key): (line if key == original else value) for key, value in scripts.items()}
        else:
            scripts[name] = line

        self._repository.write_manifest(manifest.with_scripts(scripts))
        logger.info("Saved package script %s", name)
        return scripts

    def delete_script(self, name: str, *, from_package: bool, from_custom: bool) -> ScriptsView:
        name = _require_name(name)
        if not (from_package or from_custom):
            raise ScriptValidationError("select at least one source to delete from")

        removed = False
        if from_package:
            manifest = self._repository.read_manifest()
            scripts = manifest.scripts
            if scripts.pop(name, None) is not None:
                self._repository.write_manifest(manifest.with_scripts(scripts))
                logger.info("Removed %s from package scripts", name)
                removed = True
        if from_custom:
            config = self._load_config()
            if config.find_script(name) is not None:
                remaining = [script for script in config.scripts if script.name != name]
                self._save_config(config.model_copy(update={"scripts": remaining}))
                logger.info("Removed %s from custom scripts", name)
                removed = True
        if not removed:
            raise ScriptNotFoundError(f"script '{name}' not found")
        return self.load_scripts()

    # -- overrides ---------------------------------------------------------

    def set_override_hidden(self, name: str, hidden: bool) -> ScriptsView:
        name = _require_name(name)
        overrides = self._repository.read_overrides()
        if overrides is None:
            overrides = OverrideConfig()
            logger.info("Creating override file %s", self._repository.overrides_path)

        entry = overrides.find(name)
        if entry is None:
            entries = [*overrides.scripts, OverrideEntry(name=name, hidden=hidden)]
        else:
            entries = [e.model_copy(update={"hidden": hidden}) if e is entry else e for e in overrides.scripts]
        self._repository.write_overrides(overrides.model_copy(update={"scripts": entries}))
        self._repository.ensure_ignored(self._repository.overrides_path.name)
        return self.load_scripts()

    # -- columns -----------------------------------------------------------

    def create_column(self, name: str) -> CustomConfig:
        name = _require_name(name)
        config = self._load_config()
        column = Column(id=unique_column_id(name, config.column_ids()), name=name)
        logger.info("Created column %s", column.id)
        return self._save_config(config.model_copy(update={"columns": [*config.columns, column]}))

    def rename_column(self, column_id: str, name: str) -> CustomConfig:
        name = _require_name(name)
        config = self._load_config()
        if column_id not in config.column_ids():
            raise ColumnNotFoundError(f"column '{column_id}' not found")
        columns = [Column(id=c.id, name=name) if c.id == column_id else c for c in config.columns]
        return self._save_config(config.model_copy(update={"columns": columns}))

    def delete_column(self, column_id: str) -> CustomConfig:
        config = self._load_config()
        if column_id not in config.column_ids():
            raise ColumnNotFoundError(f"column '{column_id}' not found")
        columns = [c for c in config.columns if c.id != column_id]
        scripts = [
            s.model_copy(update={"column_id": DEFAULT_COLUMN_ID}) if s.column_id == column_id else s
            for s in config.scripts
        ]
        logger.info("Deleted column %s", column_id)
        return self._save_config(config.model_copy(update={"columns": columns, "scripts": scripts}))

    def reorder_columns(self, order: list[str]) -> CustomConfig:
        config = self._load_config()
        by_id = {column.id: column for column in config.columns}
        columns = [by_id[column_id] for column_id in dict.fromkeys(order) if column_id in by_id]
        columns += [column for column in config.columns if column.id not in order]
        return self._save_config(config.model_copy(update={"columns": columns}))

    # -- helpers -----------------------------------------------------------

    def _load_config(self) -> CustomConfig:
        return self._repository.read_config() or CustomConfig().normalized()

    def _save_config(self, config: CustomConfig) -> CustomConfig:
        normalized = config.normalized()
        self._repository.write_config(normalized)
        return normalized

    @staticmethod
    def _resolve_column(config: CustomConfig, column_id: Optional[str]) -> str:
        if column_id and column_id in config.column_ids():
            return column_id
        return DEFAULT_COLUMN_ID
