"""Endpoints for the merged script view, custom scripts, manifest scripts and overrides."""
from fastapi import APIRouter, Depends, HTTPException, status

from jrunner.api.deps import get_script_service
from jrunner.modules.scripts import ScriptConfigService, ScriptNotFoundError, ScriptValidationError
from jrunner.schemas import (
    ArrangeScriptsRequest,
    CustomScriptsResponse,
    DeleteScriptRequest,
    HideScriptRequest,
    PackageScriptPayload,
    PackageScriptsResponse,
    ScriptNamePayload,
    ScriptPayload,
    ScriptUpdatePayload,
    ScriptsView,
)

router = APIRouter()


@router.get("/scripts", response_model=ScriptsView)
async def get_scripts(service: ScriptConfigService = Depends(get_script_service)) -> ScriptsView:
    return service.load_scripts()


@router.post("/custom-scripts", response_model=CustomScriptsResponse)
async def create_custom_script(
    payload: ScriptPayload,
    service: ScriptConfigService = Depends(get_script_service),
) -> CustomScriptsResponse:
    try:
        scripts = service.create_custom_script(payload.to_input())
    except ScriptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return CustomScriptsResponse(custom_scripts=scripts)


@router.put("/custom-scripts", response_model=CustomScriptsResponse)
async def update_custom_script(
    payload: ScriptUpdatePayload,
    service: ScriptConfigService = Depends(get_script_service),
) -> CustomScriptsResponse:
    original_name = payload.original_name or payload.name
    try:
        scripts = service.update_custom_script(original_name, payload.to_input())
    except ScriptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ScriptNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return CustomScriptsResponse(custom_scripts=scripts)


@router.delete("/custom-scripts", response_model=CustomScriptsResponse)
async def delete_custom_script(
    payload: ScriptNamePayload,
    service: ScriptConfigService = Depends(get_script_service),
) -> CustomScriptsResponse:
    try:
        scripts = service.delete_custom_script(payload.name)
    except ScriptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ScriptNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return CustomScriptsResponse(custom_scripts=scripts)


@router.post("/custom-scripts/arrange", response_model=CustomScriptsResponse)
async def arrange_custom_scripts(
    payload: ArrangeScriptsRequest,
    service: ScriptConfigService = Depends(get_script_service),
) -> CustomScriptsResponse:
    scripts = service.arrange_custom_scripts(payload.order, payload.column_id_by_name)
    return CustomScriptsResponse(custom_scripts=scripts)


@router.post("/package-scripts", response_model=PackageScriptsResponse)
async def save_package_script(
    payload: PackageScriptPayload,
    service: ScriptConfigService = Depends(get_script_service),
) -> PackageScriptsResponse:
    try:
        scripts = service.save_package_script(payload.name, payload.command, payload.original_name)
    except ScriptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return PackageScriptsResponse(package_scripts=scripts)


@router.post("/delete-script", response_model=ScriptsView)
async def delete_script(
    payload: DeleteScriptRequest,
    service: ScriptConfigService = Depends(get_script_service),
) -> ScriptsView:
    try:
        return service.delete_script(
            payload.name,
            from_package=payload.remove_from_package,
            from_custom=payload.remove_from_custom,
        )
    except ScriptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ScriptNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/overrides/hide", response_model=ScriptsView)
async def hide_script(
    payload: HideScriptRequest,
    service: ScriptConfigService = Depends(get_script_service),
) -> ScriptsView:
    try:
        return service.set_override_hidden(payload.name, payload.hidden)
    except ScriptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
