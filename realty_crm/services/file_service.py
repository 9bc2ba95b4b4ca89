"""
File Service

Uploads project files to object storage and keeps a project_files record
for each one.
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.errors import RecordNotFound, UpstreamServiceError, ValidationError
from realty_crm.lib.permissions import CallerContext, can_edit_project, require
from realty_crm.models.project_file import ProjectFile
from realty_crm.schemas.file import FilePurpose
from realty_crm.services.project_service import ProjectService, ensure_can_mutate
from realty_crm.services.storage_service import StorageService, storage_service

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC = "application/msword"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS = "application/vnd.ms-excel"
IMAGES = ["image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"]

ALLOWED_TYPES = {
    FilePurpose.UNIT_DATA: [XLSX, XLS, "text/csv"],
    FilePurpose.IMAGE: IMAGES,
    FilePurpose.BROCHURE: [PDF, DOCX, DOC],
    FilePurpose.FLOOR_PLAN: [PDF] + IMAGES,
    FilePurpose.DOCUMENT: [PDF, DOCX, DOC, "text/plain"],
}

ALLOWED_DESCRIPTIONS = {
    FilePurpose.UNIT_DATA: "Excel files (.xlsx, .xls, .csv)",
    FilePurpose.IMAGE: "Image files (.jpg, .jpeg, .png, .gif, .webp)",
    FilePurpose.BROCHURE: "PDF and Word documents (.pdf, .doc, .docx)",
    FilePurpose.FLOOR_PLAN: "PDF and image files (.pdf, .jpg, .jpeg, .png, .gif, .webp)",
    FilePurpose.DOCUMENT: "PDF, Word, and text files (.pdf, .doc, .docx, .txt)",
}


def validate_file_type(content_type: str, purpose: FilePurpose) -> None:
    """Raise ValidationError unless the MIME type is allowed for the purpose."""
    if content_type not in ALLOWED_TYPES[purpose]:
        raise ValidationError(f"Invalid file type. Please select {ALLOWED_DESCRIPTIONS[purpose]}.")


class FileService:
    """Service for project files."""

    def __init__(self, db: AsyncSession, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage or storage_service

    async def upload_file(
        self,
        caller: CallerContext,
        project_id: UUID,
        filename: str,
        content: bytes,
        content_type: str,
        purpose: FilePurpose,
    ) -> ProjectFile:
        """Store a file under the project and record it."""
        validate_file_type(content_type, purpose)
        require(can_edit_project(caller.role), "Your role cannot upload project files")
        project = await ProjectService(self.db).get_project(caller, project_id)
        ensure_can_mutate(caller, project)

        path = self.storage.get_project_file_path(
            project.organization_id, project_id, purpose.value, filename
        )
        uploaded = await self.storage.upload(path, content, content_type)

        record = ProjectFile(
            project_id=project_id,
            organization_id=project.organization_id,
            file_name=filename,
            file_purpose=purpose.value,
            file_size=uploaded['size'],
            mime_type=content_type,
            storage_bucket=self.storage.bucket,
            storage_path=path,
            public_url=uploaded['public_url'],
            uploaded_by=caller.employee_id,
        )
        self.db.add(record)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to record file %s: %s", path, e)
            raise UpstreamServiceError("Failed to record uploaded file")

        await self.db.refresh(record)
        logger.info("Uploaded %s (%d bytes) to %s", filename, record.file_size, path)
        return record

    async def list_files(self, caller: CallerContext, project_id: UUID) -> List[ProjectFile]:
        """Files of a visible project, newest first."""
        await ProjectService(self.db).get_project(caller, project_id)

        result = await self.db.execute(
            select(ProjectFile)
            .where(ProjectFile.project_id == project_id)
            .order_by(ProjectFile.uploaded_at.desc())
        )
        return list(result.scalars().all())

    async def delete_file(self, caller: CallerContext, file_id: UUID) -> None:
        """Remove the stored object and its record."""
        require(can_edit_project(caller.role), "Your role cannot delete project files")

        record = await self.db.get(ProjectFile, file_id)
        if not record or (not caller.is_admin and record.organization_id != caller.organization_id):
            raise RecordNotFound(f"File {file_id} not found")

        await self.storage.delete(record.storage_path)
        await self.db.delete(record)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete file record %s: %s", file_id, e)
            raise UpstreamServiceError("Failed to delete file")
