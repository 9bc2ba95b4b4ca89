from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db
from realty_crm.lib.deps import get_caller
from realty_crm.lib.permissions import CallerContext
from realty_crm.schemas.promotion import (
    PromotionCreate,
    PromotionListResponse,
    PromotionMetricsResponse,
    PromotionResponse,
    PromotionStatus,
    PromotionUpdate,
)
from realty_crm.services.promotion_service import PromotionService

router = APIRouter(prefix="/promotions", tags=["Promotions"])


@router.get("", response_model=PromotionListResponse)
async def list_promotions(
    project_id: Optional[UUID] = None,
    status_filter: Optional[PromotionStatus] = Query(None, alias="status"),
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    List promotions visible to the caller.
    """
    service = PromotionService(db)
    promotions, total = await service.list_promotions(caller, project_id=project_id, status=status_filter)

    return PromotionListResponse(
        items=[PromotionResponse.model_validate(p) for p in promotions],
        total=total,
    )


@router.post("", response_model=PromotionResponse, status_code=status.HTTP_201_CREATED)
async def create_promotion(
    data: PromotionCreate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a draft promotion. Developer or admin only.
    """
    service = PromotionService(db)
    promotion = await service.create_promotion(caller, data)
    return PromotionResponse.model_validate(promotion)


@router.get("/{promotion_id}", response_model=PromotionResponse)
async def get_promotion(
    promotion_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a promotion.
    """
    service = PromotionService(db)
    promotion = await service.get_promotion(caller, promotion_id)
    return PromotionResponse.model_validate(promotion)


@router.put("/{promotion_id}", response_model=PromotionResponse)
async def update_promotion(
    promotion_id: UUID,
    data: PromotionUpdate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a promotion. Developer or admin only.
    """
    service = PromotionService(db)
    promotion = await service.update_promotion(caller, promotion_id, data)
    return PromotionResponse.model_validate(promotion)


@router.delete("/{promotion_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_promotion(
    promotion_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a promotion. Developer or admin only.
    """
    service = PromotionService(db)
    await service.delete_promotion(caller, promotion_id)


@router.get("/{promotion_id}/metrics", response_model=Optional[PromotionMetricsResponse])
async def get_promotion_metrics(
    promotion_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Delivery metrics for a promotion, or null if none recorded yet.
    """
    service = PromotionService(db)
    metrics = await service.get_metrics(caller, promotion_id)
    return PromotionMetricsResponse.model_validate(metrics) if metrics else None
