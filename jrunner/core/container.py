"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass

from jrunner.core.config import Settings
from jrunner.modules.runs import ProcessRunner, RunRegistry
from jrunner.modules.scripts import ScriptConfigService


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    scripts: ScriptConfigService
    registry: RunRegistry
    runner: ProcessRunner

    @classmethod
    def build(cls, settings: Settings) -> "ApplicationContainer":
        registry = RunRegistry(max_finished_runs=settings.runner.max_finished_runs)
        runner = ProcessRunner(
            registry,
            cwd=settings.project_root,
            stop_timeout=settings.stop_timeout,
        )
        return cls(
            settings=settings,
            scripts=ScriptConfigService.from_settings(settings),
            registry=registry,
            runner=runner,
        )

    async def shutdown(self) -> None:
        await self.runner.shutdown()


__all__ = ["ApplicationContainer"]
