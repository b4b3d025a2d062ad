"""Reusable FastAPI dependencies resolved from the application container."""

from fastapi import Depends, Request

from jrunner.core.container import ApplicationContainer
from jrunner.modules.runs import ProcessRunner, RunRegistry
from jrunner.modules.scripts import ScriptConfigService


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_script_service(container: ApplicationContainer = Depends(get_container)) -> ScriptConfigService:
    return container.scripts


def get_run_registry(container: ApplicationContainer = Depends(get_container)) -> RunRegistry:
    return container.registry


def get_process_runner(container: ApplicationContainer = Depends(get_container)) -> ProcessRunner:
    return container.runner


__all__ = [
    "get_container",
    "get_process_runner",
    "get_run_registry",
    "get_script_service",
]
