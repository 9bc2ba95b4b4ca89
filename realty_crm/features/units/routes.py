from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db
from realty_crm.lib.deps import get_caller
from realty_crm.lib.permissions import CallerContext
from realty_crm.lib.uploads import read_upload
from realty_crm.schemas.unit import (
    ImportPreviewResponse,
    ImportResultResponse,
    UnitCreate,
    UnitFilters,
    UnitListResponse,
    UnitResponse,
    UnitStatus,
    UnitSummary,
    UnitUpdate,
)
from realty_crm.services.storage_service import StorageService, get_storage
from realty_crm.services.unit_service import UnitService

router = APIRouter(prefix="/projects/{project_id}/units", tags=["Units"])


@router.get("", response_model=UnitListResponse)
async def list_units(
    project_id: UUID,
    status_filter: Optional[UnitStatus] = Query(None, alias="status"),
    bedrooms: Optional[int] = Query(None, ge=0, le=10),
    tower: Optional[str] = None,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    List a project's units ordered by floor and unit number.
    """
    service = UnitService(db)
    filters = UnitFilters(status=status_filter, bedrooms=bedrooms, tower=tower)
    units, total = await service.list_units(caller, project_id, filters)

    return UnitListResponse(
        units=[UnitResponse.model_validate(u) for u in units],
        total=total,
    )


@router.get("/summary", response_model=Optional[UnitSummary])
async def get_unit_summary(
    project_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the unit summary (counts by status, bedrooms, floor and tower).
    Returns null when the project has no units.
    """
    service = UnitService(db)
    return await service.get_unit_summary(caller, project_id)


@router.post("/import/preview", response_model=ImportPreviewResponse)
async def preview_import(
    project_id: UUID,
    file: UploadFile = File(...),
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Map and normalize an uploaded sheet without saving it.
    """
    content = await read_upload(file)
    service = UnitService(db)
    return await service.preview_import(caller, project_id, file.filename or "", content)


@router.post("/import", response_model=ImportResultResponse)
async def import_units(
    project_id: UUID,
    file: UploadFile = File(...),
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Import units from an .xlsx or .csv sheet. Developer or admin only.
    Existing units with the same unit number are updated in place.
    """
    content = await read_upload(file)
    service = UnitService(db, storage)
    return await service.import_units(caller, project_id, file.filename or "", content)


@router.post("", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
async def create_unit(
    project_id: UUID,
    data: UnitCreate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Add a single unit. Developer or admin only.
    """
    service = UnitService(db)
    unit = await service.create_unit(caller, project_id, data)
    return UnitResponse.model_validate(unit)


@router.get("/{unit_id}", response_model=UnitResponse)
async def get_unit(
    project_id: UUID,
    unit_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a single unit.
    """
    service = UnitService(db)
    unit = await service.get_unit(caller, project_id, unit_id)
    return UnitResponse.model_validate(unit)


@router.put("/{unit_id}", response_model=UnitResponse)
async def update_unit(
    project_id: UUID,
    unit_id: UUID,
    data: UnitUpdate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a unit. Developer or admin only.
    """
    service = UnitService(db)
    unit = await service.update_unit(caller, project_id, unit_id, data)
    return UnitResponse.model_validate(unit)


@router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_unit(
    project_id: UUID,
    unit_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a unit. Developer or admin only.
    """
    service = UnitService(db)
    await service.delete_unit(caller, project_id, unit_id)
