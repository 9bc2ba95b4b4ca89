from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from realty_crm.lib.database import get_db
from realty_crm.lib.errors import AuthenticationMissing, RecordNotFound
from realty_crm.lib.permissions import CallerContext, parse_role
from realty_crm.lib.security import decode_access_token
from realty_crm.models.employee import Employee

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> UUID:
    """Return the authenticated user id from the bearer token."""
    if not credentials:
        raise AuthenticationMissing()

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationMissing("Invalid or expired access token")

    try:
        return UUID(payload["sub"])
    except ValueError:
        raise AuthenticationMissing("Invalid token subject")


async def get_caller(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> CallerContext:
    """Resolve the caller's employee record into a CallerContext."""
    result = await db.execute(
        select(Employee).where(
            Employee.user_id == user_id,
            Employee.status == "active"
        )
    )
    employee = result.scalar_one_or_none()

    if not employee:
        raise RecordNotFound("Employee not found")

    return CallerContext(
        user_id=user_id,
        employee_id=employee.id,
        organization_id=employee.organization_id,
        role=parse_role(employee.role),
    )
