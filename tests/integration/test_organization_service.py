import uuid

import pytest

from realty_crm.lib.errors import RecordNotFound, ValidationError
from realty_crm.lib.permissions import Role
from realty_crm.schemas.auth import OrganizationType, RegisterRequest
from realty_crm.services.organization_service import OrganizationService, generate_employee_code


def _registration(**overrides):
    fields = dict(
        email="founder@skyline.test",
        first_name="Lina",
        last_name="Haddad",
        organization_name="Sky-line Developments",
        organization_type=OrganizationType.DEVELOPER,
        contact_phone="+971500000900",
    )
    fields.update(overrides)
    return RegisterRequest(**fields)


def test_employee_code_uses_organization_prefix():
    code = generate_employee_code("Sky-line Developments")

    assert code[:3] == "SKY"
    assert len(code) == 7
    assert code[3:].isdigit()


async def test_register_creates_admin_employee(db):
    user_id = uuid.uuid4()

    employee, organization = await OrganizationService(db).register(user_id, _registration())

    assert organization.name == "Sky-line Developments"
    assert organization.type == "developer"
    assert organization.status == "active"
    assert organization.contact_email == "founder@skyline.test"
    assert employee.user_id == user_id
    assert employee.organization_id == organization.id
    assert employee.role == Role.ADMIN.value
    assert employee.permissions["can_manage_employees"] is True
    assert employee.employee_code.startswith("SKY")


async def test_register_twice_is_rejected(db):
    service = OrganizationService(db)
    user_id = uuid.uuid4()
    await service.register(user_id, _registration())

    with pytest.raises(ValidationError):
        await service.register(user_id, _registration(organization_name="Second Org"))


async def test_profile_records_last_login(db, developer_employee, developer):
    employee, organization = await OrganizationService(db).get_profile(developer)

    assert employee.id == developer_employee.id
    assert organization.name == "Skyline Developments"
    await db.refresh(employee)
    assert employee.last_login is not None


async def test_other_organizations_are_hidden_from_non_admins(db, developer, other_org, admin):
    service = OrganizationService(db)

    with pytest.raises(RecordNotFound):
        await service.get_organization(developer, other_org.id)

    organization = await service.get_organization(admin, other_org.id)
    assert organization.name == "Harbor Estates"


async def test_team_lists_agents_of_own_organization(db, developer, agent_employee, other_developer):
    members = await OrganizationService(db).list_team_members(developer)

    assert [m.id for m in members] == [agent_employee.id]


async def test_team_of_agent_caller(db, agent):
    members = await OrganizationService(db).list_team_members(agent)

    assert [m.first_name for m in members] == ["Alex"]
