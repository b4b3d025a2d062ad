"""Domain representations for runs and their output."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from .broadcaster import RunChannel, Subscription

StreamName = Literal["stdout", "stderr"]


class RunStatus(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    TERMINATED = "terminated"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {RunStatus.COMPLETED, RunStatus.TERMINATED, RunStatus.FAILED}


@dataclass(slots=True, frozen=True)
class LogEntry:
    type: StreamName
    data: str

    def to_payload(self) -> dict[str, str]:
        return {"type": self.type, "data": self.data}


@dataclass(slots=True, frozen=True)
class RunEvent:
    event: Literal["data", "end"]
    payload: dict[str, Any]

    @classmethod
    def data(cls, entry: LogEntry) -> "RunEvent":
        return cls("data", entry.to_payload())

    @classmethod
    def end(cls, code: Optional[int]) -> "RunEvent":
        return cls("end", {"code": code})

    @property
    def is_end(self) -> bool:
        return self.event == "end"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class RunRecord:
    id: str
    name: str
    command: str
    logs: list[LogEntry] = field(default_factory=list)
    status: RunStatus = RunStatus.CREATED
    exit_code: Optional[int] = None
    pid: Optional[int] = None
    created_at: datetime = field(default_factory=_utcnow)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    stop_requested: bool = False
    process: Optional[asyncio.subprocess.Process] = field(default=None, repr=False)
    channel: RunChannel = field(default_factory=RunChannel, repr=False)
    done: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def is_finished(self) -> bool:
        return self.status.is_terminal

    @property
    def listener_count(self) -> int:
        return self.channel.listener_count

    def mark_running(self, process: asyncio.subprocess.Process) -> None:
        self.process = process
        self.pid = process.pid
        self.status = RunStatus.RUNNING
        self.started_at = _utcnow()

    def append(self, stream: StreamName, data: str) -> LogEntry:
        entry = LogEntry(stream, data)
        self.logs.append(entry)
        self.channel.publish(RunEvent.data(entry))
        return entry

    def attach(self) -> Subscription:
        return self.channel.subscribe(RunEvent.data(entry) for entry in self.logs)

    def finish(self, status: RunStatus, exit_code: Optional[int]) -> None:
        if self.is_finished:
            return
        self.status = status
        self.exit_code = exit_code
        self.finished_at = _utcnow()
        self.process = None
        self.channel.close(RunEvent.end(exit_code))
        self.done.set()
