"""Run lifecycle endpoints and the server-sent event output stream."""
import asyncio
import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from jrunner.api.deps import get_container, get_process_runner, get_run_registry
from jrunner.core.container import ApplicationContainer
from jrunner.modules.runs import (
    ProcessRunner,
    RunEvent,
    RunNotFoundError,
    RunRecord,
    RunRegistry,
    RunValidationError,
)
from jrunner.modules.scripts import join_commands
from jrunner.schemas import RunDetail, RunListResponse, RunRequest, RunStartResponse, RunSummary

logger = logging.getLogger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: RunEvent) -> str:
    data = json.dumps(event.payload, ensure_ascii=False)
    if event.event == "data":
        return f"data: {data}\n\n"
    return f"event: {event.event}\ndata: {data}\n\n"


async def _event_stream(record: RunRecord, heartbeat: float) -> AsyncIterator[str]:
    subscription = record.attach()
    try:
        while not subscription.finished:
            try:
                event = await asyncio.wait_for(subscription.get(), timeout=heartbeat)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield format_sse(event)
    finally:
        subscription.close()
        logger.debug("Listener detached from run %s", record.id)


@router.post("/run", response_model=RunStartResponse)
async def start_run(
    payload: RunRequest,
    runner: ProcessRunner = Depends(get_process_runner),
) -> RunStartResponse:
    try:
        record = runner.start(payload.name, join_commands(payload.command))
    except RunValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return RunStartResponse(id=record.id)


@router.get("/runs", response_model=RunListResponse)
async def list_runs(registry: RunRegistry = Depends(get_run_registry)) -> RunListResponse:
    return RunListResponse(runs=[RunSummary.from_record(record) for record in registry.list_runs()])


@router.get("/runs/{run_id}", response_model=RunDetail)
async def get_run(run_id: str, registry: RunRegistry = Depends(get_run_registry)) -> RunDetail:
    try:
        return RunDetail.from_record(registry.get(run_id))
    except RunNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/runs/{run_id}/stream")
async def stream_run(
    run_id: str,
    container: ApplicationContainer = Depends(get_container),
) -> StreamingResponse:
    try:
        record = container.registry.get(run_id)
    except RunNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return StreamingResponse(
        _event_stream(record, container.settings.stream_heartbeat_interval),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/runs/{run_id}/stop")
async def stop_run(run_id: str, runner: ProcessRunner = Depends(get_process_runner)) -> dict:
    try:
        runner.stop(run_id)
    except RunNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return {"ok": True}
