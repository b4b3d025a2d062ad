"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3000


class ProjectSettings(BaseModel):
    root: Path = Field(default_factory=Path.cwd)
    manifest_file: str = "package.json"
    config_file: str = "jrunner-conf.json"
    overrides_file: str = ".jrunner-conf-overrides.json"
    gitignore_file: str = ".gitignore"


class RunnerSettings(BaseModel):
    # Seconds to wait after SIGTERM before escalating to SIGKILL; None or 0 disables.
    stop_timeout: Optional[float] = 5.0
    max_finished_runs: Optional[int] = Field(default=None, ge=1)


class StreamSettings(BaseModel):
    heartbeat_interval: float = 15.0


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "production", "test"] = "development"
    project_name: str = "jrunner"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    server: ServerSettings = ServerSettings()
    project: ProjectSettings = ProjectSettings()
    runner: RunnerSettings = RunnerSettings()
    stream: StreamSettings = StreamSettings()

    # Relative paths resolve against the installed jrunner package.
    ui_dir: Path = Path("ui")
    port_override: Optional[int] = Field(default=None, validation_alias="PORT")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.port_override or self.server.port

    @property
    def project_root(self) -> Path:
        return self.project.root.resolve()

    @property
    def manifest_path(self) -> Path:
        return self.project_root / self.project.manifest_file

    @property
    def config_path(self) -> Path:
        return self.project_root / self.project.config_file

    @property
    def overrides_path(self) -> Path:
        return self.project_root / self.project.overrides_file

    @property
    def gitignore_path(self) -> Path:
        return self.project_root / self.project.gitignore_file

    @property
    def stop_timeout(self) -> Optional[float]:
        return self.runner.stop_timeout or None

    @property
    def stream_heartbeat_interval(self) -> float:
        return self.stream.heartbeat_interval


@lru_cache()
def get_settings() -> Settings:
    return Settings()
