import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from jrunner import __version__
from jrunner.api import create_api_router
from jrunner.core.config import Settings, get_settings
from jrunner.core.container import ApplicationContainer
from jrunner.modules.scripts import ConfigPersistenceError, ConfigReadError

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent


def _resolve_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (BASE_DIR / path).resolve()


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: ApplicationContainer = app.state.container
    logger.info("Serving scripts from %s", container.settings.project_root)
    yield
    await container.shutdown()


async def config_read_error_handler(request: Request, exc: ConfigReadError) -> JSONResponse:
    logger.error("Failed to read configuration: %s", exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


async def config_persistence_error_handler(request: Request, exc: ConfigPersistenceError) -> JSONResponse:
    logger.error("Failed to persist configuration: %s", exc, exc_info=exc.__cause__)
    return JSONResponse(status_code=500, content={"detail": "failed to persist configuration"})


def _mount_ui(app: FastAPI, ui_dir: Path, api_prefix: str) -> None:
    index_file = ui_dir / "index.html"
    assets_dir = ui_dir / "assets"

    if assets_dir.is_dir():
        app.mount("/assets", StaticFiles(directory=str(assets_dir)), name="assets")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_ui(full_path: str) -> FileResponse:
        if full_path.startswith(api_prefix.strip("/") + "/"):
            raise HTTPException(status_code=404, detail="Not Found")
        candidate = (ui_dir / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(ui_dir):
            return FileResponse(candidate)
        return FileResponse(index_file)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.project_name,
        description="Local dashboard for running project scripts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = ApplicationContainer.build(settings)

    app.add_exception_handler(ConfigReadError, config_read_error_handler)
    app.add_exception_handler(ConfigPersistenceError, config_persistence_error_handler)

    app.include_router(create_api_router(settings.api_prefix))

    if settings.is_production:
        ui_dir = _resolve_path(settings.ui_dir).resolve()
        if (ui_dir / "index.html").is_file():
            _mount_ui(app, ui_dir, settings.api_prefix)
        else:
            logger.warning("UI bundle not found at %s, serving the API only", ui_dir)

    return app


app = create_app()
