from typing import Optional
from uuid import UUID

import pydantic
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db
from realty_crm.lib.deps import get_caller
from realty_crm.lib.errors import ValidationError
from realty_crm.lib.permissions import CallerContext
from realty_crm.lib.uploads import read_upload
from realty_crm.schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectStatus,
    ProjectUpdate,
)
from realty_crm.services.project_service import ProjectService
from realty_crm.services.storage_service import StorageService, get_storage

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    List projects visible to the caller, newest first.
    """
    service = ProjectService(db)
    projects, total = await service.list_projects(caller, status=status_filter, search=search)

    return ProjectListResponse(
        items=[ProjectResponse.model_validate(p) for p in projects],
        total=total,
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    data: ProjectCreate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new project in draft status. Developer or admin only.
    """
    service = ProjectService(db)
    project = await service.create_project(caller, data)
    return ProjectResponse.model_validate(project)


@router.post("/with-brochure", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project_with_brochure(
    data: str = Form(..., description="ProjectCreate as JSON"),
    brochure: UploadFile = File(...),
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Create a project and attach a PDF brochure.
    A failed brochure upload does not block project creation.
    """
    try:
        project_data = ProjectCreate.model_validate_json(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid project data: {e.errors()[0]['msg']}")

    content = await read_upload(brochure)
    service = ProjectService(db, storage)
    project = await service.create_project(
        caller,
        project_data,
        brochure=(brochure.filename or "brochure.pdf", content, brochure.content_type or ""),
    )
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get project details.
    """
    service = ProjectService(db)
    project = await service.get_project(caller, project_id)
    return ProjectResponse.model_validate(project)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: UUID,
    data: ProjectUpdate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Update project details. Developer or admin only.
    """
    service = ProjectService(db)
    project = await service.update_project(caller, project_id, data)
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a project with its units and files. Developer or admin only.
    """
    service = ProjectService(db)
    await service.delete_project(caller, project_id)
