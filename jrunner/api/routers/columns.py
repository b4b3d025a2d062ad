"""Column lifecycle endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Path, status

from jrunner.api.deps import get_script_service
from jrunner.modules.scripts import ColumnNotFoundError, CustomConfig, ScriptConfigService, ScriptValidationError
from jrunner.schemas import ColumnOrderRequest, ColumnPayload, ColumnsResponse

router = APIRouter()


def _to_response(config: CustomConfig) -> ColumnsResponse:
    return ColumnsResponse(columns=config.columns, custom_scripts=config.scripts)


@router.post("", response_model=ColumnsResponse)
async def create_column(
    payload: ColumnPayload,
    service: ScriptConfigService = Depends(get_script_service),
) -> ColumnsResponse:
    try:
        return _to_response(service.create_column(payload.name))
    except ScriptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/reorder", response_model=ColumnsResponse)
async def reorder_columns(
    payload: ColumnOrderRequest,
    service: ScriptConfigService = Depends(get_script_service),
) -> ColumnsResponse:
    return _to_response(service.reorder_columns(payload.order))


@router.put("/{column_id}", response_model=ColumnsResponse)
async def rename_column(
    payload: ColumnPayload,
    column_id: str = Path(..., min_length=1),
    service: ScriptConfigService = Depends(get_script_service),
) -> ColumnsResponse:
    try:
        return _to_response(service.rename_column(column_id, payload.name))
    except ScriptValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ColumnNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.delete("/{column_id}", response_model=ColumnsResponse)
async def delete_column(
    column_id: str = Path(..., min_length=1),
    service: ScriptConfigService = Depends(get_script_service),
) -> ColumnsResponse:
    try:
        return _to_response(service.delete_column(column_id))
    except ColumnNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
