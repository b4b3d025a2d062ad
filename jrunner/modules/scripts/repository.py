"""Flat-file persistence for the manifest, custom-script config and overrides."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .exceptions import ConfigPersistenceError, ConfigReadError
from .models import CustomConfig, Manifest, OverrideConfig

logger = logging.getLogger(__name__)


class ScriptConfigRepository:
    """Loads and persists the three JSON documents backing the script board."""

    def __init__(
        self,
        *,
        manifest_path: Path,
        config_path: Path,
        overrides_path: Path,
        gitignore_path: Path,
    ) -> None:
        self._manifest_path = manifest_path
        self._config_path = config_path
        self._overrides_path = overrides_path
        self._gitignore_path = gitignore_path

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def overrides_path(self) -> Path:
        return self._overrides_path

    def config_exists(self) -> bool:
        return self._config_path.is_file()

    def overrides_exist(self) -> bool:
        return self._overrides_path.is_file()

    def read_manifest(self) -> Manifest:
        if not self._manifest_path.is_file():
            raise ConfigReadError(f"{self._manifest_path.name} not found in {self._manifest_path.parent}")
        payload = self._read_json(self._manifest_path)
        if not isinstance(payload, dict):
            raise ConfigReadError(f"{self._manifest_path.name} must contain a JSON object")
        return Manifest(payload)

    def write_manifest(self, manifest: Manifest) -> None:
        self._write_json(self._manifest_path, manifest.data)

    def read_config(self) -> Optional[CustomConfig]:
        if not self.config_exists():
            return None
        payload = self._read_json(self._config_path)
        try:
            return CustomConfig.model_validate(payload).normalized()
        except ValidationError as exc:
            raise ConfigReadError(f"{self._config_path.name} has an invalid structure: {exc}") from exc

    def write_config(self, config: CustomConfig) -> None:
        self._write_json(self._config_path, config.model_dump(by_alias=True, exclude_none=True))

    def read_overrides(self) -> Optional[OverrideConfig]:
        if not self.overrides_exist():
            return None
        payload = self._read_json(self._overrides_path)
        try:
            return OverrideConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigReadError(f"{self._overrides_path.name} has an invalid structure: {exc}") from exc

    def write_overrides(self, overrides: OverrideConfig) -> None:
        self._write_json(self._overrides_path, overrides.model_dump(by_alias=True, exclude_none=True))

    def ensure_ignored(self, pattern: str) -> bool:
        """Append ``pattern`` to the ignore file unless it is already mentioned."""
        try:
            existing = self._gitignore_path.read_text(encoding="utf-8") if self._gitignore_path.exists() else ""
        except OSError as exc:
            raise ConfigPersistenceError(f"failed to read {self._gitignore_path.name}") from exc
        if pattern in existing:
            return False
        prefix = "" if not existing or existing.endswith("\n") else "\n"
        try:
            with self._gitignore_path.open("a", encoding="utf-8") as fh:
                fh.write(f"{prefix}{pattern}\n")
        except OSError as exc:
            raise ConfigPersistenceError(f"failed to update {self._gitignore_path.name}") from exc
        logger.info("Added %s to %s", pattern, self._gitignore_path)
        return True

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigReadError(f"{path.name} is not valid JSON: {exc}") from exc
        except OSError as exc:
            raise ConfigReadError(f"failed to read {path.name}") from exc

    @staticmethod
    def _write_json(path: Path, payload: Any) -> None:
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        tmp_name: Optional[str] = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise ConfigPersistenceError(f"failed to persist {path.name}") from exc
        logger.debug("Wrote %s", path)
