"""
Organization Service

Registration, profile lookup and team listing. Accounts themselves live with
the hosted auth provider; this service only records the organization and the
employee linked to an authenticated user id.
"""
import logging
import re
import time
from datetime import datetime
from typing import List, Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.best_effort import best_effort
from realty_crm.lib.errors import RecordNotFound, UpstreamServiceError, ValidationError
from realty_crm.lib.permissions import CallerContext, Role
from realty_crm.models.employee import Employee
from realty_crm.models.organization import Organization
from realty_crm.schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)

ADMIN_PERMISSIONS = {
    "can_create_projects": True,
    "can_manage_employees": True,
    "can_view_analytics": True,
    "can_manage_organization": True,
}


def generate_employee_code(organization_name: str) -> str:
    """First three alphanumerics of the organization, upper-cased, plus 4 clock digits."""
    prefix = re.sub(r"[^a-zA-Z0-9]", "", organization_name or "")[:3].upper()
    suffix = str(int(time.time() * 1000))[-4:]
    return f"{prefix}{suffix}"


class OrganizationService:
    """Service for organizations and their employees."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self,
        user_id: UUID,
        data: RegisterRequest,
    ) -> Tuple[Employee, Organization]:
        """
        Create an organization with the registering user as its admin.

        Raises:
            ValidationError: the user already belongs to an organization
        """
        existing = await self.db.execute(
            select(Employee).where(Employee.user_id == user_id)
        )
        if existing.scalar_one_or_none():
            raise ValidationError("User is already registered with an organization")

        organization = Organization(
            name=data.organization_name,
            type=data.organization_type.value,
            status="active",
            contact_email=data.email,
            contact_phone=data.contact_phone,
            address=data.address,
            website=data.website,
            description=data.description,
            created_by=user_id,
        )
        self.db.add(organization)

        try:
            await self.db.flush()
            employee = Employee(
                organization_id=organization.id,
                user_id=user_id,
                employee_code=generate_employee_code(data.organization_name),
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                phone=data.contact_phone,
                role=Role.ADMIN.value,
                status="active",
                permissions=dict(ADMIN_PERMISSIONS),
            )
            self.db.add(employee)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Registration failed for user %s: %s", user_id, e)
            raise UpstreamServiceError("Failed to register organization")

        await self.db.refresh(organization)
        await self.db.refresh(employee)
        logger.info("Registered organization %s for user %s", organization.id, user_id)
        return employee, organization

    async def _touch_last_login(self, employee_id: UUID) -> None:
        await self.db.execute(
            update(Employee)
            .where(Employee.id == employee_id)
            .values(last_login=datetime.utcnow())
        )
        await self.db.commit()

    async def get_profile(self, caller: CallerContext) -> Tuple[Employee, Organization]:
        """Return the caller's employee and organization, recording the sign-in."""
        await best_effort(
            f"update last_login for employee {caller.employee_id}",
            self._touch_last_login(caller.employee_id),
            session=self.db,
        )

        employee = await self.db.get(Employee, caller.employee_id)
        if not employee:
            raise RecordNotFound("Employee not found")
        organization = await self.get_organization(caller, employee.organization_id)
        return employee, organization

    async def get_organization(self, caller: CallerContext, organization_id: UUID) -> Organization:
        """Admins may read any organization; everyone else only their own."""
        if not caller.is_admin and organization_id != caller.organization_id:
            raise RecordNotFound(f"Organization {organization_id} not found")

        organization = await self.db.get(Organization, organization_id)
        if not organization:
            raise RecordNotFound(f"Organization {organization_id} not found")
        return organization

    async def list_team_members(self, caller: CallerContext) -> List[Employee]:
        """Agents of the caller's organization, e.g. for lead assignment."""
        result = await self.db.execute(
            select(Employee).where(
                Employee.organization_id == caller.organization_id,
                Employee.role == Role.AGENT.value,
            ).order_by(Employee.first_name, Employee.last_name)
        )
        return list(result.scalars().all())
