"""Shared pytest fixtures: in-memory database, seeded organizations, callers and fake storage."""
import os
import uuid
from typing import Any, Dict, Optional

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import realty_crm.models  # noqa: F401  registers tables
from realty_crm.lib.database import Base
from realty_crm.lib.errors import UpstreamServiceError
from realty_crm.lib.permissions import CallerContext, parse_role
from realty_crm.models.employee import Employee
from realty_crm.models.organization import Organization
from realty_crm.models.project import Project
from realty_crm.services.storage_service import StorageService


class FakeObjectStorage:
    """In-memory stand-in for the S3 adapter."""

    def __init__(self, fail: bool = False):
        self.bucket = "project-files"
        self.objects: Dict[str, bytes] = {}
        self.fail = fail

    async def upload_file(self, key: str, body: bytes, content_type: str, metadata: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        if self.fail:
            raise UpstreamServiceError("Upload failed: storage offline")
        self.objects[key] = body
        return {'key': key, 'size': len(body), 'content_type': content_type}

    async def download_file(self, key: str) -> bytes:
        return self.objects[key]

    async def delete_file(self, key: str) -> bool:
        self.objects.pop(key, None)
        return True

    def get_public_url(self, key: str) -> str:
        return f"https://files.test/{self.bucket}/{key}"


@pytest.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture()
def object_storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture()
def storage(object_storage) -> StorageService:
    return StorageService(storage=object_storage)


async def _add_organization(db, name: str, org_type: str) -> Organization:
    organization = Organization(name=name, type=org_type, status="active")
    db.add(organization)
    await db.commit()
    return organization


async def _add_employee(db, organization: Organization, role: str, first_name: str) -> Employee:
    employee = Employee(
        organization_id=organization.id,
        user_id=uuid.uuid4(),
        first_name=first_name,
        last_name="Tester",
        email=f"{first_name.lower()}@{organization.name.lower().replace(' ', '')}.test",
        role=role,
        status="active",
    )
    db.add(employee)
    await db.commit()
    return employee


def caller_for(employee: Employee) -> CallerContext:
    return CallerContext(
        user_id=employee.user_id,
        employee_id=employee.id,
        organization_id=employee.organization_id,
        role=parse_role(employee.role),
    )


@pytest.fixture()
async def developer_org(db) -> Organization:
    return await _add_organization(db, "Skyline Developments", "developer")


@pytest.fixture()
async def other_org(db) -> Organization:
    return await _add_organization(db, "Harbor Estates", "developer")


@pytest.fixture()
async def agency_org(db) -> Organization:
    return await _add_organization(db, "Prime Agents", "agent")


@pytest.fixture()
async def developer_employee(db, developer_org) -> Employee:
    return await _add_employee(db, developer_org, "developer", "Dana")


@pytest.fixture()
async def developer(developer_employee) -> CallerContext:
    return caller_for(developer_employee)


@pytest.fixture()
async def other_developer(db, other_org) -> CallerContext:
    return caller_for(await _add_employee(db, other_org, "developer", "Omar"))


@pytest.fixture()
async def agent_employee(db, developer_org) -> Employee:
    return await _add_employee(db, developer_org, "agent", "Alex")


@pytest.fixture()
async def agent(agent_employee) -> CallerContext:
    return caller_for(agent_employee)


@pytest.fixture()
async def admin(db, agency_org) -> CallerContext:
    return caller_for(await _add_employee(db, agency_org, "admin", "Ada"))


@pytest.fixture()
async def project(db, developer_org, developer_employee) -> Project:
    project = Project(
        organization_id=developer_org.id,
        created_by=developer_employee.id,
        name="Marina Heights",
        location="Dubai Marina",
        status="draft",
        leads_count=0,
        views_count=0,
    )
    db.add(project)
    await db.commit()
    return project


@pytest.fixture()
async def published_project(db, other_org) -> Project:
    project = Project(
        organization_id=other_org.id,
        name="Harbor View",
        location="Creek Harbour",
        status="published",
        leads_count=0,
        views_count=0,
    )
    db.add(project)
    await db.commit()
    return project


@pytest.fixture()
def tower_a_sheet():
    """Header row and two data rows of a typical developer export."""
    headers = ["Tower", "Unit No", "Floor", "Type", "Area", "Price", "Status"]
    rows = [
        ["Tower A", "101", "1", "1BHK", "650", "900000", "Available"],
        ["Tower A", "102", "1", "Studio", "450", "600000", "Sold"],
    ]
    return headers, rows
