from datetime import date

import pytest

from realty_crm.lib.errors import AuthorizationDenied, RecordNotFound, ValidationError
from realty_crm.schemas.project import ProjectCreate, ProjectStatus, ProjectUpdate
from realty_crm.services.project_service import ProjectService


async def test_developer_sees_only_own_organization(db, developer, project, published_project):
    projects, total = await ProjectService(db).list_projects(developer)

    assert total == 1
    assert [p.name for p in projects] == ["Marina Heights"]


async def test_agent_sees_published_projects_of_every_organization(db, agent, project, published_project):
    projects, total = await ProjectService(db).list_projects(agent)

    assert total == 1
    assert projects[0].id == published_project.id


async def test_admin_sees_everything(db, admin, project, published_project):
    _, total = await ProjectService(db).list_projects(admin)

    assert total == 2


async def test_search_matches_name_or_location(db, admin, project, published_project):
    by_name, _ = await ProjectService(db).list_projects(admin, search="marina")
    by_location, _ = await ProjectService(db).list_projects(admin, search="creek")

    assert [p.id for p in by_name] == [project.id]
    assert [p.id for p in by_location] == [published_project.id]


async def test_status_filter(db, admin, project, published_project):
    projects, total = await ProjectService(db).list_projects(admin, status=ProjectStatus.DRAFT)

    assert total == 1
    assert projects[0].id == project.id


async def test_create_project_starts_as_draft(db, developer):
    data = ProjectCreate(name="  Palm Residences ", location="Palm Jumeirah", completion_date="")

    project = await ProjectService(db).create_project(developer, data)

    assert project.name == "Palm Residences"
    assert project.status == "draft"
    assert project.creation_method == "manual"
    assert project.organization_id == developer.organization_id
    assert project.leads_count == 0
    assert project.completion_date is None


async def test_handover_before_completion_is_rejected(db, developer):
    data = ProjectCreate(
        name="Palm Residences",
        location="Palm Jumeirah",
        completion_date=date(2027, 6, 1),
        handover_date=date(2027, 1, 1),
    )

    with pytest.raises(ValidationError):
        await ProjectService(db).create_project(developer, data)


async def test_agent_cannot_create_project(db, agent):
    with pytest.raises(AuthorizationDenied):
        await ProjectService(db).create_project(agent, ProjectCreate(name="X", location="Y"))


async def test_brochure_is_uploaded_with_project(db, developer, storage, object_storage):
    project = await ProjectService(db, storage).create_project(
        developer,
        ProjectCreate(name="Palm Residences", location="Palm Jumeirah"),
        brochure=("brochure.pdf", b"%PDF-1.7", "application/pdf"),
    )

    assert project.brochure_url.startswith("https://files.test/project-files/projects/")
    assert list(object_storage.objects.values()) == [b"%PDF-1.7"]


async def test_brochure_failure_does_not_block_creation(db, developer, storage, object_storage):
    object_storage.fail = True

    project = await ProjectService(db, storage).create_project(
        developer,
        ProjectCreate(name="Palm Residences", location="Palm Jumeirah"),
        brochure=("brochure.pdf", b"%PDF-1.7", "application/pdf"),
    )

    assert project.id is not None
    assert project.brochure_url is None


async def test_non_pdf_brochure_is_skipped(db, developer, storage, object_storage):
    project = await ProjectService(db, storage).create_project(
        developer,
        ProjectCreate(name="Palm Residences", location="Palm Jumeirah"),
        brochure=("brochure.docx", b"PK", "application/msword"),
    )

    assert project.brochure_url is None
    assert object_storage.objects == {}


async def test_update_project(db, developer, project):
    updated = await ProjectService(db).update_project(
        developer, project.id, ProjectUpdate(status=ProjectStatus.PUBLISHED, total_units=120)
    )

    assert updated.status == "published"
    assert updated.total_units == 120
    assert updated.name == "Marina Heights"


async def test_agent_cannot_update_or_delete(db, agent, admin, published_project):
    service = ProjectService(db)

    with pytest.raises(AuthorizationDenied):
        await service.update_project(agent, published_project.id, ProjectUpdate(name="Renamed"))
    with pytest.raises(AuthorizationDenied):
        await service.delete_project(agent, published_project.id)

    unchanged = await service.get_project(admin, published_project.id)
    assert unchanged.name == "Harbor View"


async def test_developer_cannot_touch_other_organization(db, other_developer, project):
    with pytest.raises(RecordNotFound):
        await ProjectService(db).update_project(other_developer, project.id, ProjectUpdate(name="Mine"))


async def test_admin_can_delete_any_project(db, admin, project):
    service = ProjectService(db)

    await service.delete_project(admin, project.id)

    with pytest.raises(RecordNotFound):
        await service.get_project(admin, project.id)
