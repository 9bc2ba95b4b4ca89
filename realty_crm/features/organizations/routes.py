from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db
from realty_crm.lib.deps import get_caller
from realty_crm.lib.permissions import CallerContext
from realty_crm.schemas.auth import OrganizationResponse, TeamListResponse, TeamMemberResponse
from realty_crm.services.organization_service import OrganizationService

router = APIRouter(prefix="/organizations", tags=["Organizations"])


@router.get("/me/team", response_model=TeamListResponse)
async def list_team(
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    List the agents of the caller's organization.
    """
    service = OrganizationService(db)
    members = await service.list_team_members(caller)

    return TeamListResponse(members=[
        TeamMemberResponse(id=m.id, name=m.full_name, email=m.email)
        for m in members
    ])


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get an organization. Non-admins may only read their own.
    """
    service = OrganizationService(db)
    organization = await service.get_organization(caller, organization_id)
    return OrganizationResponse.model_validate(organization)
