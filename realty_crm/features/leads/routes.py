from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db
from realty_crm.lib.deps import get_caller
from realty_crm.lib.permissions import CallerContext
from realty_crm.schemas.lead import (
    LeadCreate,
    LeadFilters,
    LeadListResponse,
    LeadResponse,
    LeadStage,
    LeadStatsResponse,
    LeadStatus,
    LeadUpdate,
)
from realty_crm.services.lead_service import LeadService

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.get("", response_model=LeadListResponse)
async def list_leads(
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    stage: Optional[LeadStage] = None,
    project_id: Optional[UUID] = None,
    assigned_to: Optional[UUID] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    List the organization's leads with filters and pagination.
    """
    filters = LeadFilters(
        status=status_filter,
        stage=stage,
        project_id=project_id,
        assigned_to=assigned_to,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    service = LeadService(db)
    leads, total = await service.list_leads(caller, filters, page=page, limit=limit)

    return LeadListResponse(
        leads=[LeadResponse.model_validate(lead) for lead in leads],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/stats", response_model=LeadStatsResponse)
async def get_lead_stats(
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Lead counts by status and stage, this month's leads and conversion rate.
    """
    service = LeadService(db)
    stats = await service.get_lead_stats(caller)
    return LeadStatsResponse(**stats)


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    data: LeadCreate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Capture a new lead.
    """
    service = LeadService(db)
    lead = await service.create_lead(caller, data)
    return LeadResponse.model_validate(lead)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get a lead.
    """
    service = LeadService(db)
    lead = await service.get_lead(caller, lead_id)
    return LeadResponse.model_validate(lead)


@router.put("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: UUID,
    data: LeadUpdate,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a lead. Developer or admin only.
    """
    service = LeadService(db)
    lead = await service.update_lead(caller, lead_id, data)
    return LeadResponse.model_validate(lead)


@router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lead(
    lead_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a lead. Developer or admin only.
    """
    service = LeadService(db)
    await service.delete_lead(caller, lead_id)
