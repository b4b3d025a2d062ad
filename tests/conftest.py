"""Pytest configuration and fixtures."""

import json
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from jrunner.core.config import ProjectSettings, RunnerSettings, Settings, StreamSettings
from jrunner.main import create_app
from jrunner.modules.scripts import ScriptConfigService

posix_only = pytest.mark.skipif(os.name != "posix", reason="requires a POSIX shell")

MANIFEST = {
    "name": "demo-app",
    "version": "1.2.3",
    "scripts": {
        "dev": "vite",
        "build": "tsc && vite build",
        "test": "vitest",
    },
    "devDependencies": {"vite": "^5.0.0"},
}


def write_json(path: Path, payload) -> None:
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def project_dir(tmp_path):
    """A throw-away project directory holding only a manifest."""
    write_json(tmp_path / "package.json", MANIFEST)
    return tmp_path


@pytest.fixture
def settings(project_dir):
    return Settings(
        environment="test",
        project=ProjectSettings(root=project_dir),
        runner=RunnerSettings(stop_timeout=2.0),
        stream=StreamSettings(heartbeat_interval=1.0),
    )


@pytest.fixture
def service(settings):
    return ScriptConfigService.from_settings(settings)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
