"""
Promotion Service

Handles promotional campaigns and their delivery metrics.
Agents see active promotions of every organization; developers manage their
own organization's campaigns.
"""
import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.errors import RecordNotFound, UpstreamServiceError, ValidationError
from realty_crm.lib.permissions import CallerContext, can_manage_promotions, require
from realty_crm.models.promotion import Promotion, PromotionMetrics
from realty_crm.schemas.promotion import PromotionCreate, PromotionStatus, PromotionUpdate
from realty_crm.services.project_service import ProjectService

logger = logging.getLogger(__name__)


def visible_promotions(caller: CallerContext):
    """Base query for the promotions the caller may read."""
    query = select(Promotion)
    if caller.is_admin:
        return query
    if caller.is_agent:
        return query.where(Promotion.status == PromotionStatus.ACTIVE.value)
    return query.where(Promotion.organization_id == caller.organization_id)


class PromotionService:
    """Service for managing promotions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============================================
    # HELPER METHODS
    # ============================================

    async def _get_mutable(self, caller: CallerContext, promotion_id: UUID) -> Promotion:
        require(can_manage_promotions(caller.role), "Your role cannot manage promotions")
        promotion = await self.get_promotion(caller, promotion_id)
        require(
            caller.is_admin or promotion.organization_id == caller.organization_id,
            "Promotion belongs to another organization",
        )
        return promotion

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to %s: %s", action, e)
            raise UpstreamServiceError(f"Failed to {action}")

    # ============================================
    # PROMOTION CRUD
    # ============================================

    async def list_promotions(
        self,
        caller: CallerContext,
        project_id: Optional[UUID] = None,
        status: Optional[PromotionStatus] = None,
    ) -> Tuple[List[Promotion], int]:
        """List visible promotions, newest first."""
        query = visible_promotions(caller)
        if project_id:
            query = query.where(Promotion.project_id == project_id)
        if status:
            query = query.where(Promotion.status == status.value)

        count_result = await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar_one()

        result = await self.db.execute(query.order_by(Promotion.created_at.desc()))
        return list(result.scalars().all()), total

    async def get_promotion(self, caller: CallerContext, promotion_id: UUID) -> Promotion:
        """Get a promotion visible to the caller, or raise RecordNotFound."""
        result = await self.db.execute(
            visible_promotions(caller).where(Promotion.id == promotion_id)
        )
        promotion = result.scalar_one_or_none()
        if not promotion:
            raise RecordNotFound(f"Promotion {promotion_id} not found")
        return promotion

    async def create_promotion(self, caller: CallerContext, data: PromotionCreate) -> Promotion:
        """Create a draft promotion, optionally tied to one of the caller's projects."""
        require(can_manage_promotions(caller.role), "Your role cannot manage promotions")

        if data.end_date < data.start_date:
            raise ValidationError("End date cannot precede start date")

        if data.project_id:
            await ProjectService(self.db).get_project(caller, data.project_id)

        promotion = Promotion(
            organization_id=caller.organization_id,
            created_by=caller.employee_id,
            status=PromotionStatus.DRAFT.value,
            **data.model_dump(),
        )
        self.db.add(promotion)
        await self._commit("create promotion")
        await self.db.refresh(promotion)

        logger.info("Promotion %s created by %s", promotion.id, caller.employee_id)
        return promotion

    async def update_promotion(
        self,
        caller: CallerContext,
        promotion_id: UUID,
        data: PromotionUpdate,
    ) -> Promotion:
        """Update promotion fields."""
        promotion = await self._get_mutable(caller, promotion_id)

        update_data = data.model_dump(exclude_unset=True)
        if update_data.get('status') is not None:
            update_data['status'] = update_data['status'].value

        start = update_data.get('start_date') or promotion.start_date
        end = update_data.get('end_date') or promotion.end_date
        if end < start:
            raise ValidationError("End date cannot precede start date")

        for field, value in update_data.items():
            setattr(promotion, field, value)

        await self._commit("update promotion")
        await self.db.refresh(promotion)
        return promotion

    async def delete_promotion(self, caller: CallerContext, promotion_id: UUID) -> None:
        """Delete a promotion and its metrics."""
        promotion = await self._get_mutable(caller, promotion_id)

        await self.db.delete(promotion)
        await self._commit("delete promotion")

    # ============================================
    # METRICS
    # ============================================

    async def get_metrics(self, caller: CallerContext, promotion_id: UUID) -> Optional[PromotionMetrics]:
        """Delivery metrics for a promotion; None until any are recorded."""
        await self.get_promotion(caller, promotion_id)

        result = await self.db.execute(
            select(PromotionMetrics).where(PromotionMetrics.promotion_id == promotion_id)
        )
        return result.scalar_one_or_none()
