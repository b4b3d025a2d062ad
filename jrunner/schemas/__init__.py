"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from jrunner.modules.runs import RunRecord
from jrunner.modules.scripts import Column, ScriptDefinition, ScriptInput, ScriptsView

CommandValue = Union[str, list[str]]


class CamelSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    ok: bool = True


class InitResponse(BaseModel):
    initialized: bool = True


class ScriptPayload(CamelSchema):
    name: str
    command: CommandValue = Field(default_factory=list)
    description: Optional[str] = ""
    color: Optional[str] = None
    column_id: Optional[str] = None

    def to_input(self) -> ScriptInput:
        return ScriptInput(
            name=self.name,
            command=[self.command] if isinstance(self.command, str) else list(self.command),
            description=self.description or "",
            color=self.color,
            column_id=self.column_id,
        )


class ScriptUpdatePayload(ScriptPayload):
    original_name: Optional[str] = None


class ScriptNamePayload(BaseModel):
    name: str


class PackageScriptPayload(CamelSchema):
    name: str
    command: CommandValue = Field(default_factory=list)
    original_name: Optional[str] = None


class DeleteScriptRequest(CamelSchema):
    name: str
    remove_from_package: bool = False
    remove_from_custom: bool = False


class HideScriptRequest(BaseModel):
    name: str
    hidden: bool


class ArrangeScriptsRequest(CamelSchema):
    order: list[str] = Field(default_factory=list)
    column_id_by_name: dict[str, str] = Field(default_factory=dict)


class ColumnPayload(BaseModel):
    name: str


class ColumnOrderRequest(BaseModel):
    order: list[str] = Field(default_factory=list)


class CustomScriptsResponse(CamelSchema):
    custom_scripts: list[ScriptDefinition]


class PackageScriptsResponse(CamelSchema):
    package_scripts: dict[str, str]


class ColumnsResponse(CamelSchema):
    columns: list[Column]
    custom_scripts: list[ScriptDefinition]


class RunRequest(BaseModel):
    name: str = ""
    command: CommandValue


class RunStartResponse(BaseModel):
    id: str


class LogEntryResponse(BaseModel):
    type: str
    data: str


class RunSummary(CamelSchema):
    id: str
    name: str
    command: str
    status: str
    code: Optional[int] = None
    pid: Optional[int] = None
    listeners: int = 0
    created_at: datetime
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: RunRecord) -> "RunSummary":
        return cls(
            id=record.id,
            name=record.name,
            command=record.command,
            status=record.status.value,
            code=record.exit_code,
            pid=record.pid,
            listeners=record.listener_count,
            created_at=record.created_at,
            started_at=record.started_at,
            finished_at=record.finished_at,
        )


class RunDetail(RunSummary):
    logs: list[LogEntryResponse] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: RunRecord) -> "RunDetail":
        summary = RunSummary.from_record(record)
        return cls(
            **summary.model_dump(),
            logs=[LogEntryResponse(type=entry.type, data=entry.data) for entry in record.logs],
        )


class RunListResponse(BaseModel):
    runs: list[RunSummary]


__all__ = [
    "ArrangeScriptsRequest",
    "ColumnOrderRequest",
    "ColumnPayload",
    "ColumnsResponse",
    "CustomScriptsResponse",
    "DeleteScriptRequest",
    "HealthResponse",
    "HideScriptRequest",
    "InitResponse",
    "PackageScriptPayload",
    "PackageScriptsResponse",
    "RunDetail",
    "RunListResponse",
    "RunRequest",
    "RunStartResponse",
    "RunSummary",
    "ScriptNamePayload",
    "ScriptPayload",
    "ScriptUpdatePayload",
    "ScriptsView",
]
