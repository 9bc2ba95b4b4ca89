from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db
from realty_crm.lib.deps import get_caller
from realty_crm.lib.permissions import CallerContext
from realty_crm.lib.uploads import read_upload
from realty_crm.schemas.file import FilePurpose, ProjectFileListResponse, ProjectFileResponse
from realty_crm.services.file_service import FileService
from realty_crm.services.storage_service import StorageService, get_storage

router = APIRouter(tags=["Files"])


@router.post(
    "/projects/{project_id}/files",
    response_model=ProjectFileResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    project_id: UUID,
    purpose: FilePurpose = Form(...),
    file: UploadFile = File(...),
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Upload a project file. Allowed types depend on the purpose.
    """
    content = await read_upload(file)
    service = FileService(db, storage)
    record = await service.upload_file(
        caller,
        project_id,
        file.filename or "file",
        content,
        file.content_type or "application/octet-stream",
        purpose,
    )
    return ProjectFileResponse.model_validate(record)


@router.get("/projects/{project_id}/files", response_model=ProjectFileListResponse)
async def list_files(
    project_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    List a project's files, newest first.
    """
    service = FileService(db)
    files = await service.list_files(caller, project_id)

    return ProjectFileListResponse(
        files=[ProjectFileResponse.model_validate(f) for f in files],
        total=len(files),
    )


@router.delete("/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Delete a file from storage and its record.
    """
    service = FileService(db, storage)
    await service.delete_file(caller, file_id)
