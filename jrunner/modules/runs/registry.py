"""In-memory table of run records keyed by run id."""

from __future__ import annotations

import logging
import uuid
from typing import Iterator, Optional

from .exceptions import RunNotFoundError
from .models import RunRecord

logger = logging.getLogger(__name__)


class RunRegistry:
    def __init__(self, max_finished_runs: Optional[int] = None) -> None:
        self._runs: dict[str, RunRecord] = {}
        self._max_finished_runs = max_finished_runs

    def create(self, name: str, command: str) -> RunRecord:
        run_id = str(uuid.uuid4())
        while run_id in self._runs:
            run_id = str(uuid.uuid4())
        record = RunRecord(id=run_id, name=name, command=command)
        self._runs[run_id] = record
        return record

    def get(self, run_id: str) -> RunRecord:
        record = self._runs.get(run_id)
        if record is None:
            raise RunNotFoundError(f"run '{run_id}' not found")
        return record

    def list_runs(self) -> list[RunRecord]:
        return list(self._runs.values())

    def running(self) -> list[RunRecord]:
        return [record for record in self._runs.values() if not record.is_finished]

    def prune(self) -> int:
        """Evict the oldest finished runs beyond the retention cap."""
        if self._max_finished_runs is None:
            return 0
        finished = [record for record in self._runs.values() if record.is_finished]
        excess = finished[: max(len(finished) - self._max_finished_runs, 0)]
        for record in excess:
            del self._runs[record.id]
        if excess:
            logger.debug("Evicted %d finished run(s)", len(excess))
        return len(excess)

    def __contains__(self, run_id: object) -> bool:
        return run_id in self._runs

    def __len__(self) -> int:
        return len(self._runs)

    def __iter__(self) -> Iterator[RunRecord]:
        return iter(list(self._runs.values()))
