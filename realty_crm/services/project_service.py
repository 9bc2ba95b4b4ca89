"""
Project Service

Handles project CRUD with organization scoping:
- agents read published projects of every organization
- developers read and write their own organization's projects
- admins read and write everything
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.errors import RecordNotFound, UpstreamServiceError, ValidationError
from realty_crm.lib.permissions import (
    CallerContext,
    can_create_project,
    can_delete_project,
    can_edit_project,
    require,
)
from realty_crm.models.project import Project
from realty_crm.schemas.project import ProjectCreate, ProjectStatus, ProjectUpdate
from realty_crm.services.storage_service import StorageService, storage_service

logger = logging.getLogger(__name__)

BROCHURE_CONTENT_TYPES = {"application/pdf"}


def visible_projects(caller: CallerContext):
    """Base query for the projects the caller may read."""
    query = select(Project)
    if caller.is_admin:
        return query
    if caller.is_agent:
        return query.where(Project.status == ProjectStatus.PUBLISHED.value)
    return query.where(Project.organization_id == caller.organization_id)


def ensure_can_mutate(caller: CallerContext, project: Project) -> None:
    """Developers may only touch their own organization's projects."""
    require(
        caller.is_admin or project.organization_id == caller.organization_id,
        "Project belongs to another organization",
    )


class ProjectService:
    """Service for managing projects."""

    def __init__(self, db: AsyncSession, storage: Optional[StorageService] = None):
        self.db = db
        self.storage = storage or storage_service

    # ============================================
    # HELPER METHODS
    # ============================================

    async def get_project(self, caller: CallerContext, project_id: UUID) -> Project:
        """Get a project visible to the caller, or raise RecordNotFound."""
        result = await self.db.execute(
            visible_projects(caller).where(Project.id == project_id)
        )
        project = result.scalar_one_or_none()
        if not project:
            raise RecordNotFound(f"Project {project_id} not found")
        return project

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to %s: %s", action, e)
            raise UpstreamServiceError(f"Failed to {action}")

    async def _upload_brochure(
        self,
        caller: CallerContext,
        filename: str,
        content: bytes,
        content_type: str,
    ) -> Optional[str]:
        """Upload a brochure; failures are logged and the project is created without it."""
        if content_type not in BROCHURE_CONTENT_TYPES:
            logger.warning("Skipping brochure %s with type %s", filename, content_type)
            return None
        try:
            path = self.storage.get_brochure_path(caller.organization_id, filename)
            uploaded = await self.storage.upload(path, content, content_type)
            return uploaded['public_url']
        except Exception as e:
            logger.warning("Brochure upload failed, continuing without it: %s", e)
            return None

    # ============================================
    # PROJECT CRUD
    # ============================================

    async def list_projects(
        self,
        caller: CallerContext,
        status: Optional[ProjectStatus] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Project], int]:
        """List visible projects, newest first."""
        query = visible_projects(caller)

        if status:
            query = query.where(Project.status == status.value)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(
                Project.name.ilike(pattern),
                Project.location.ilike(pattern),
            ))

        count_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar_one()

        result = await self.db.execute(query.order_by(Project.created_at.desc()))
        return list(result.scalars().all()), total

    async def create_project(
        self,
        caller: CallerContext,
        data: ProjectCreate,
        brochure: Optional[Tuple[str, bytes, str]] = None,
    ) -> Project:
        """
        Create a project in draft status.

        Args:
            caller: Calling employee
            data: Project fields
            brochure: Optional (filename, content, content_type) to upload first
        """
        require(can_create_project(caller.role), "Your role cannot create projects")

        if data.handover_date and data.completion_date and data.handover_date < data.completion_date:
            raise ValidationError("Handover date cannot precede completion date")

        fields = data.model_dump()
        fields['creation_method'] = data.creation_method.value
        if brochure:
            fields['brochure_url'] = await self._upload_brochure(caller, *brochure) or fields['brochure_url']

        project = Project(
            organization_id=caller.organization_id,
            created_by=caller.employee_id,
            status=ProjectStatus.DRAFT.value,
            views_count=0,
            leads_count=0,
            **fields,
        )
        self.db.add(project)
        await self._commit("create project")
        await self.db.refresh(project)

        logger.info("Project %s created by %s", project.id, caller.employee_id)
        return project

    async def update_project(
        self,
        caller: CallerContext,
        project_id: UUID,
        data: ProjectUpdate,
    ) -> Project:
        """Update project fields."""
        require(can_edit_project(caller.role), "Your role cannot edit projects")
        project = await self.get_project(caller, project_id)
        ensure_can_mutate(caller, project)

        update_data = data.model_dump(exclude_unset=True)
        if 'status' in update_data and update_data['status'] is not None:
            update_data['status'] = update_data['status'].value

        for field, value in update_data.items():
            setattr(project, field, value)

        await self._commit("update project")
        await self.db.refresh(project)
        return project

    async def delete_project(self, caller: CallerContext, project_id: UUID) -> None:
        """Delete a project and, by cascade, its units and files."""
        require(can_delete_project(caller.role), "Your role cannot delete projects")
        project = await self.get_project(caller, project_id)
        ensure_can_mutate(caller, project)

        await self.db.delete(project)
        await self._commit("delete project")
        logger.info("Project %s deleted by %s", project_id, caller.employee_id)
