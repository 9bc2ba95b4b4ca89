"""
Lead Service

Handles leads for the caller's organization. Every query is scoped to the
caller's organization regardless of role.
"""
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Tuple
from uuid import UUID

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.best_effort import best_effort
from realty_crm.lib.errors import RecordNotFound, UpstreamServiceError
from realty_crm.lib.permissions import (
    CallerContext,
    can_create_leads,
    can_delete_leads,
    can_edit_leads,
    can_view_leads,
    require,
)
from realty_crm.models.lead import Lead
from realty_crm.models.project import Project
from realty_crm.schemas.lead import LeadCreate, LeadFilters, LeadStage, LeadStatus, LeadUpdate
from realty_crm.services.project_service import ProjectService

logger = logging.getLogger(__name__)


class LeadService:
    """Service for managing leads."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============================================
    # HELPER METHODS
    # ============================================

    def _scoped(self, caller: CallerContext):
        return select(Lead).where(Lead.organization_id == caller.organization_id)

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to %s: %s", action, e)
            raise UpstreamServiceError(f"Failed to {action}")

    async def _adjust_leads_count(self, project_id: UUID, delta: int) -> None:
        """Shift a project's lead counter, never below zero."""
        current = func.coalesce(Project.leads_count, 0)
        await self.db.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(
                leads_count=case((current + delta < 0, 0), else_=current + delta),
                updated_at=datetime.utcnow(),
            )
        )
        await self.db.commit()

    # ============================================
    # LEAD CRUD
    # ============================================

    async def create_lead(self, caller: CallerContext, data: LeadCreate) -> Lead:
        """Create a lead in the caller's organization and bump the project's counter."""
        require(can_create_leads(caller.role), "Your role cannot create leads")

        if data.project_id:
            await ProjectService(self.db).get_project(caller, data.project_id)

        lead = Lead(
            organization_id=caller.organization_id,
            created_by=caller.employee_id,
            status=LeadStatus.NEW.value,
            stage=LeadStage.INQUIRY.value,
            **data.model_dump(),
        )
        self.db.add(lead)
        await self._commit("create lead")
        await self.db.refresh(lead)

        if lead.project_id:
            await best_effort(
                f"increment leads_count for project {lead.project_id}",
                self._adjust_leads_count(lead.project_id, 1),
                session=self.db,
            )

        logger.info("Lead %s created by %s", lead.id, caller.employee_id)
        return lead

    async def list_leads(
        self,
        caller: CallerContext,
        filters: LeadFilters = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Lead], int]:
        """List the organization's leads, newest first."""
        require(can_view_leads(caller.role), "Your role cannot view leads")

        query = self._scoped(caller)
        if filters:
            if filters.status:
                query = query.where(Lead.status == filters.status.value)
            if filters.stage:
                query = query.where(Lead.stage == filters.stage.value)
            if filters.project_id:
                query = query.where(Lead.project_id == filters.project_id)
            if filters.assigned_to:
                query = query.where(Lead.assigned_to == filters.assigned_to)
            if filters.date_from:
                query = query.where(Lead.created_at >= filters.date_from)
            if filters.date_to:
                query = query.where(Lead.created_at <= filters.date_to)
            if filters.search:
                pattern = f"%{filters.search.strip()}%"
                query = query.where(or_(
                    Lead.first_name.ilike(pattern),
                    Lead.last_name.ilike(pattern),
                    Lead.email.ilike(pattern),
                    Lead.phone.ilike(pattern),
                ))

        count_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar_one()

        result = await self.db.execute(
            query.order_by(Lead.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_lead(self, caller: CallerContext, lead_id: UUID) -> Lead:
        """Get a lead from the caller's organization, or raise RecordNotFound."""
        require(can_view_leads(caller.role), "Your role cannot view leads")

        result = await self.db.execute(self._scoped(caller).where(Lead.id == lead_id))
        lead = result.scalar_one_or_none()
        if not lead:
            raise RecordNotFound(f"Lead {lead_id} not found")
        return lead

    async def update_lead(self, caller: CallerContext, lead_id: UUID, data: LeadUpdate) -> Lead:
        """Update lead fields."""
        require(can_edit_leads(caller.role), "Your role cannot edit leads")
        lead = await self.get_lead(caller, lead_id)

        update_data = data.model_dump(exclude_unset=True)
        for field in ('status', 'stage'):
            if update_data.get(field) is not None:
                update_data[field] = update_data[field].value

        for field, value in update_data.items():
            setattr(lead, field, value)

        await self._commit("update lead")
        await self.db.refresh(lead)
        return lead

    async def delete_lead(self, caller: CallerContext, lead_id: UUID) -> None:
        """Delete a lead and decrement its project's counter."""
        require(can_delete_leads(caller.role), "Your role cannot delete leads")
        lead = await self.get_lead(caller, lead_id)
        project_id = lead.project_id

        await self.db.delete(lead)
        await self._commit("delete lead")

        if project_id:
            await best_effort(
                f"decrement leads_count for project {project_id}",
                self._adjust_leads_count(project_id, -1),
                session=self.db,
            )

    # ============================================
    # STATS
    # ============================================

    async def get_lead_stats(self, caller: CallerContext) -> Dict[str, Any]:
        """
        Lead counts for the caller's organization.

        Returns:
            {
                'total': all leads,
                'by_status': count per status,
                'by_stage': count per stage,
                'this_month': leads created in the current calendar month,
                'conversion_rate': won / total * 100
            }
        """
        require(can_view_leads(caller.role), "Your role cannot view leads")

        result = await self.db.execute(
            select(Lead.status, Lead.stage, Lead.created_at)
            .where(Lead.organization_id == caller.organization_id)
        )
        rows = result.all()

        now = datetime.utcnow()
        by_status = Counter(row.status for row in rows)
        by_stage = Counter(row.stage for row in rows)
        this_month = sum(
            1 for row in rows
            if row.created_at and row.created_at.year == now.year and row.created_at.month == now.month
        )
        total = len(rows)
        won = by_status.get(LeadStatus.WON.value, 0)

        return {
            'total': total,
            'by_status': dict(by_status),
            'by_stage': dict(by_stage),
            'this_month': this_month,
            'conversion_rate': (won / total) * 100 if total else 0.0,
        }
