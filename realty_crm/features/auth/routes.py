from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db
from realty_crm.lib.deps import get_caller, get_current_user_id
from realty_crm.lib.permissions import CallerContext
from realty_crm.schemas.auth import (
    EmployeeResponse,
    OrganizationResponse,
    ProfileResponse,
    RegisterRequest,
)
from realty_crm.services.organization_service import OrganizationService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """
    Create an organization for a freshly signed-up user.
    The user becomes the organization's admin employee.
    """
    service = OrganizationService(db)
    employee, organization = await service.register(user_id, request)

    return ProfileResponse(
        employee=EmployeeResponse.model_validate(employee),
        organization=OrganizationResponse.model_validate(organization),
    )


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    caller: CallerContext = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get current employee and organization.
    """
    service = OrganizationService(db)
    employee, organization = await service.get_profile(caller)

    return ProfileResponse(
        employee=EmployeeResponse.model_validate(employee),
        organization=OrganizationResponse.model_validate(organization),
    )
