from fastapi import APIRouter

from jrunner.api.routers import columns, runs, scripts, system


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(system.router, tags=["system"])
    router.include_router(scripts.router, tags=["scripts"])
    router.include_router(columns.router, prefix="/columns", tags=["columns"])
    router.include_router(runs.router, tags=["runs"])
    return router


__all__ = [
    "create_api_router",
]
