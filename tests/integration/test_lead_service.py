from datetime import datetime

import pytest

from realty_crm.lib.errors import AuthorizationDenied, RecordNotFound
from realty_crm.models.lead import Lead
from realty_crm.schemas.lead import LeadCreate, LeadFilters, LeadStatus, LeadUpdate
from realty_crm.services.lead_service import LeadService


def _lead(**overrides):
    fields = dict(first_name="Sara", last_name="Khan", phone="+971500000001", email="sara@example.com")
    fields.update(overrides)
    return LeadCreate(**fields)


async def test_create_lead_increments_project_counter(db, developer, project):
    service = LeadService(db)

    lead = await service.create_lead(developer, _lead(project_id=project.id))

    assert lead.status == "new"
    assert lead.stage == "inquiry"
    assert lead.organization_id == developer.organization_id
    await db.refresh(project)
    assert project.leads_count == 1


async def test_delete_lead_decrements_counter_but_not_below_zero(db, developer, project):
    service = LeadService(db)
    first = await service.create_lead(developer, _lead(project_id=project.id))
    second = await service.create_lead(developer, _lead(project_id=project.id, first_name="Omar"))

    await db.refresh(project)
    assert project.leads_count == 2
    project.leads_count = 1
    await db.commit()

    await service.delete_lead(developer, first.id)
    await service.delete_lead(developer, second.id)

    await db.refresh(project)
    assert project.leads_count == 0


async def test_leads_are_scoped_to_caller_organization(db, developer, other_developer):
    service = LeadService(db)
    lead = await service.create_lead(developer, _lead())

    _, total = await service.list_leads(other_developer)
    assert total == 0
    with pytest.raises(RecordNotFound):
        await service.get_lead(other_developer, lead.id)


async def test_agents_can_capture_but_not_delete_leads(db, agent):
    service = LeadService(db)
    lead = await service.create_lead(agent, _lead())

    with pytest.raises(AuthorizationDenied):
        await service.delete_lead(agent, lead.id)
    with pytest.raises(AuthorizationDenied):
        await service.update_lead(agent, lead.id, LeadUpdate(status=LeadStatus.CONTACTED))


async def test_list_filters_and_pagination(db, developer):
    service = LeadService(db)
    for i in range(5):
        await service.create_lead(developer, _lead(first_name=f"Buyer{i}", phone=f"+97150000010{i}"))
    won = await service.create_lead(developer, _lead(first_name="Winner", phone="+971509999999"))
    await service.update_lead(developer, won.id, LeadUpdate(status=LeadStatus.WON))

    page, total = await service.list_leads(developer, page=2, limit=4)
    assert total == 6
    assert len(page) == 2

    found, total = await service.list_leads(developer, LeadFilters(search="winner"))
    assert total == 1
    assert found[0].id == won.id

    found, total = await service.list_leads(developer, LeadFilters(status=LeadStatus.WON))
    assert [lead.id for lead in found] == [won.id]


async def test_lead_stats(db, developer):
    service = LeadService(db)
    leads = [await service.create_lead(developer, _lead(phone=f"+9715000002{i}")) for i in range(4)]
    await service.update_lead(developer, leads[0].id, LeadUpdate(status=LeadStatus.WON))

    old = Lead(
        organization_id=developer.organization_id,
        first_name="Old",
        last_name="Lead",
        phone="+971500000300",
        status="lost",
        stage="closed",
        created_at=datetime(2020, 1, 15),
    )
    db.add(old)
    await db.commit()

    stats = await service.get_lead_stats(developer)

    assert stats['total'] == 5
    assert stats['by_status'] == {"new": 3, "won": 1, "lost": 1}
    assert stats['by_stage'] == {"inquiry": 4, "closed": 1}
    assert stats['this_month'] == 4
    assert stats['conversion_rate'] == pytest.approx(20.0)


async def test_empty_stats_have_zero_conversion(db, developer):
    stats = await LeadService(db).get_lead_stats(developer)

    assert stats['total'] == 0
    assert stats['conversion_rate'] == 0.0
