"""Health and bootstrap endpoints."""
import logging

from fastapi import APIRouter, Depends

from jrunner.api.deps import get_script_service
from jrunner.modules.scripts import ScriptConfigService
from jrunner.schemas import HealthResponse, InitResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(ok=True)


@router.post("/init", response_model=InitResponse)
async def initialize(service: ScriptConfigService = Depends(get_script_service)) -> InitResponse:
    if not service.initialize():
        logger.info("Custom script config already present, leaving it untouched")
    return InitResponse(initialized=True)
