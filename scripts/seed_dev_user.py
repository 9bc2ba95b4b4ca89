#!/usr/bin/env python3
"""Seed script to create a development organization with an admin employee."""
import asyncio
import sys
import uuid
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from realty_crm.lib.database import AsyncSessionLocal
from realty_crm.lib.security import create_access_token
from realty_crm.models.employee import Employee
from realty_crm.models.organization import Organization

DEV_EMAIL = "admin@example.com"


async def seed():
    """Create a development organization and print an access token for its admin."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Employee).where(Employee.email == DEV_EMAIL)
        )
        employee = result.scalar_one_or_none()

        if employee:
            print(f"Employee already exists: {employee.email}")
        else:
            organization = Organization(
                name="Dev Developments",
                type="developer",
                status="active",
                contact_email=DEV_EMAIL,
            )
            session.add(organization)
            await session.flush()

            employee = Employee(
                organization_id=organization.id,
                user_id=uuid.uuid4(),
                employee_code="DEV0001",
                first_name="Admin",
                last_name="User",
                email=DEV_EMAIL,
                role="admin",
                status="active",
            )
            session.add(employee)
            await session.commit()
            print(f"Created organization {organization.name} with admin {employee.email}")

        token = create_access_token(employee.user_id, email=employee.email)
        print(f"Access token: {token}")


if __name__ == "__main__":
    asyncio.run(seed())
