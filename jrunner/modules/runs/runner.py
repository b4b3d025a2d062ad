"""Spawns shell commands for runs and streams their output into the run record."""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import signal
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import RunNotRunningError, RunValidationError
from .models import RunRecord, RunStatus, StreamName
from .registry import RunRegistry

logger = logging.getLogger(__name__)

_POSIX = os.name == "posix"
_KILL_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)
CHUNK_SIZE = 4096


class ProcessRunner:
    """Launches one shell process per run; each run is one-shot.

    Every chunk read from stdout or stderr is appended to the record as soon
    as it arrives, which also pushes it to the run's live listeners. The run
    is finalized once both pipes are closed and the process has exited.
    """

    def __init__(
        self,
        registry: RunRegistry,
        *,
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
        stop_timeout: Optional[float] = 5.0,
    ) -> None:
        self._registry = registry
        self._cwd = cwd
        self._env = dict(env) if env is not None else None
        self._stop_timeout = stop_timeout
        self._tasks: set[asyncio.Task] = set()

    @property
    def registry(self) -> RunRegistry:
        return self._registry

    def start(self, name: str, command: str) -> RunRecord:
        """Register a run and spawn its command in the background."""
        if not isinstance(command, str) or not command.strip():
            raise RunValidationError("command is required")
        command = command.strip()
        record = self._registry.create((name or "").strip() or command, command)
        self._track(asyncio.create_task(self._execute(record), name=f"run-{record.id}"))
        return record

    def stop(self, run_id: str) -> RunRecord:
        record = self._registry.get(run_id)
        if record.is_finished:
            raise RunNotRunningError(f"run '{run_id}' is not running")
        record.stop_requested = True
        if record.process is None:
            logger.info("Stop requested for run %s before spawn completed", run_id)
            return record
        logger.info("Stopping run %s (pid %s)", run_id, record.pid)
        self._terminate(record)
        return record

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Terminate every live run and wait for their exit handling."""
        for record in self._registry.running():
            record.stop_requested = True
            self._send_signal(record, signal.SIGTERM)
        if not self._tasks:
            return
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        for record in self._registry.running():
            self._send_signal(record, _KILL_SIGNAL)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def wait(self, run_id: str) -> RunRecord:
        record = self._registry.get(run_id)
        await record.done.wait()
        return record

    async def _execute(self, record: RunRecord) -> None:
        try:
            try:
                process = await asyncio.create_subprocess_shell(
                    record.command,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    cwd=str(self._cwd),
                    env=self._env,
                    start_new_session=_POSIX,
                )
            except (OSError, ValueError) as exc:
                logger.exception("Failed to spawn run %s: %s", record.id, record.command)
                record.append("stderr", f"failed to start command: {exc}\n")
                record.finish(RunStatus.FAILED, None)
                return

            record.mark_running(process)
            logger.info("Run %s started: %s (pid %s)", record.id, record.name, process.pid)
            if record.stop_requested:
                self._terminate(record)

            await asyncio.gather(
                self._pump(record, process.stdout, "stdout"),
                self._pump(record, process.stderr, "stderr"),
            )
            returncode = await process.wait()

            if record.stop_requested or returncode < 0:
                status = RunStatus.TERMINATED
            else:
                status = RunStatus.COMPLETED
            code = returncode if returncode >= 0 else None
            record.finish(status, code)
            logger.info("Run %s %s with code %s", record.id, status.value, code)
        finally:
            if not record.is_finished:
                record.finish(RunStatus.TERMINATED, None)
            self._registry.prune()

    @staticmethod
    async def _pump(record: RunRecord, stream: Optional[asyncio.StreamReader], kind: StreamName) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            chunk = await stream.read(CHUNK_SIZE)
            text = decoder.decode(chunk, final=not chunk)
            if text:
                record.append(kind, text)
            if not chunk:
                return

    def _terminate(self, record: RunRecord) -> None:
        self._send_signal(record, signal.SIGTERM)
        if self._stop_timeout:
            self._track(asyncio.create_task(self._escalate(record), name=f"stop-{record.id}"))

    async def _escalate(self, record: RunRecord) -> None:
        try:
            await asyncio.wait_for(record.done.wait(), timeout=self._stop_timeout)
        except asyncio.TimeoutError:
            logger.warning("Run %s still alive %.1fs after SIGTERM, killing", record.id, self._stop_timeout)
            self._send_signal(record, _KILL_SIGNAL)

    @staticmethod
    def _send_signal(record: RunRecord, sig: int) -> None:
        process = record.process
        if process is None or process.returncode is not None:
            return
        try:
            if _POSIX:
                os.killpg(process.pid, sig)
            elif sig == signal.SIGTERM:
                process.terminate()
            else:
                process.kill()
        except ProcessLookupError:
            logger.debug("Run %s exited before signal %s was delivered", record.id, sig)

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
