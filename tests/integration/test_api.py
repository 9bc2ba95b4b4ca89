import json
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from realty_crm.lib.database import get_db
from realty_crm.lib.security import create_access_token
from realty_crm.main import app
from realty_crm.services.storage_service import get_storage

TOWER_CSV = (
    b"Tower,Unit No,Floor,Type,Area,Price,Status\n"
    b"Tower A,101,1,1BHK,650,900000,Available\n"
    b"Tower A,102,1,Studio,450,600000,Sold\n"
    b"Tower A,,1,2BHK,900,1200000,Available\n"
)


@pytest.fixture()
async def client(db, storage):
    async def override_get_db():
        yield db

    async def override_get_storage():
        return storage

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = override_get_storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _auth(employee):
    return {"Authorization": f"Bearer {create_access_token(employee.user_id, email=employee.email)}"}


async def test_health(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_missing_token_is_401(client):
    response = await client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated"}


async def test_invalid_token_is_401(client):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer nonsense"})

    assert response.status_code == 401


async def test_unregistered_user_gets_404(client):
    token = create_access_token(uuid.uuid4())

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 404


async def test_register_then_me(client):
    headers = {"Authorization": f"Bearer {create_access_token(uuid.uuid4())}"}
    payload = {
        "email": "owner@bluewater.test",
        "first_name": "Rami",
        "last_name": "Saleh",
        "organization_name": "Bluewater Realty",
        "organization_type": "agent",
    }

    registered = await client.post("/api/auth/register", json=payload, headers=headers)
    assert registered.status_code == 201
    assert registered.json()["employee"]["role"] == "admin"

    me = await client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["organization"]["name"] == "Bluewater Realty"

    again = await client.post("/api/auth/register", json=payload, headers=headers)
    assert again.status_code == 422


async def test_project_lifecycle(client, developer_employee):
    headers = _auth(developer_employee)

    created = await client.post(
        "/api/projects",
        json={"name": "Palm Residences", "location": "Palm Jumeirah", "handover_date": ""},
        headers=headers,
    )
    assert created.status_code == 201
    project_id = created.json()["id"]
    assert created.json()["status"] == "draft"

    updated = await client.put(f"/api/projects/{project_id}", json={"status": "published"}, headers=headers)
    assert updated.json()["status"] == "published"

    listing = await client.get("/api/projects", params={"status": "published"}, headers=headers)
    assert listing.json()["total"] == 1

    deleted = await client.delete(f"/api/projects/{project_id}", headers=headers)
    assert deleted.status_code == 204

    missing = await client.get(f"/api/projects/{project_id}", headers=headers)
    assert missing.status_code == 404


async def test_agent_cannot_create_project(client, agent_employee):
    response = await client.post(
        "/api/projects",
        json={"name": "Palm Residences", "location": "Palm Jumeirah"},
        headers=_auth(agent_employee),
    )

    assert response.status_code == 403
    assert response.json() == {"detail": "Your role cannot create projects"}


async def test_create_project_with_brochure(client, developer_employee, object_storage):
    response = await client.post(
        "/api/projects/with-brochure",
        data={"data": json.dumps({"name": "Creek Rise", "location": "Dubai Creek"})},
        files={"brochure": ("creek.pdf", b"%PDF-1.7 brochure", "application/pdf")},
        headers=_auth(developer_employee),
    )

    assert response.status_code == 201
    assert response.json()["brochure_url"].startswith("https://files.test/")
    assert len(object_storage.objects) == 1


async def test_import_preview_returns_camel_case_summary(client, developer_employee, project):
    response = await client.post(
        f"/api/projects/{project.id}/units/import/preview",
        files={"file": ("tower-a.csv", TOWER_CSV, "text/csv")},
        headers=_auth(developer_employee),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["rows_read"] == 3
    assert body["rows_dropped"] == 1
    assert body["summary"]["byStatus"] == {"available": 1, "sold": 1}
    assert body["summary"]["byBedrooms"] == {"1": 1, "0": 1}
    assert set(body["summary"]["confidence"]) == {"headerMapping", "dataQuality", "overall"}


async def test_import_then_summary_and_units(client, developer_employee, project, object_storage):
    headers = _auth(developer_employee)

    empty = await client.get(f"/api/projects/{project.id}/units/summary", headers=headers)
    assert empty.status_code == 200
    assert empty.json() is None

    imported = await client.post(
        f"/api/projects/{project.id}/units/import",
        files={"file": ("tower-a.csv", TOWER_CSV, "text/csv")},
        headers=headers,
    )
    assert imported.status_code == 200
    assert imported.json()["units_saved"] == 2
    assert imported.json()["source_file_id"] is not None
    assert len(object_storage.objects) == 1

    summary = await client.get(f"/api/projects/{project.id}/units/summary", headers=headers)
    assert summary.json()["total"] == 2
    assert summary.json()["byTower"] == {"Tower A": 2}

    units = await client.get(f"/api/projects/{project.id}/units", params={"status": "sold"}, headers=headers)
    assert units.json()["total"] == 1
    assert units.json()["units"][0]["unit_number"] == "102"


async def test_agent_cannot_import_units(client, agent_employee, project):
    response = await client.post(
        f"/api/projects/{project.id}/units/import",
        files={"file": ("tower-a.csv", TOWER_CSV, "text/csv")},
        headers=_auth(agent_employee),
    )

    assert response.status_code == 403


async def test_empty_upload_is_rejected(client, developer_employee, project):
    response = await client.post(
        f"/api/projects/{project.id}/units/import/preview",
        files={"file": ("empty.csv", b"", "text/csv")},
        headers=_auth(developer_employee),
    )

    assert response.status_code == 422
    assert response.json() == {"detail": "Uploaded file is empty"}


async def test_unsupported_sheet_is_rejected(client, developer_employee, project):
    response = await client.post(
        f"/api/projects/{project.id}/units/import/preview",
        files={"file": ("units.pdf", b"%PDF", "application/pdf")},
        headers=_auth(developer_employee),
    )

    assert response.status_code == 422


async def test_lead_stats_use_camel_case(client, developer_employee, project):
    headers = _auth(developer_employee)
    created = await client.post(
        "/api/leads",
        json={"first_name": "Sara", "last_name": "Khan", "phone": "+971500000001", "project_id": str(project.id)},
        headers=headers,
    )
    assert created.status_code == 201

    stats = await client.get("/api/leads/stats", headers=headers)

    assert stats.status_code == 200
    assert stats.json() == {
        "total": 1,
        "byStatus": {"new": 1},
        "byStage": {"inquiry": 1},
        "thisMonth": 1,
        "conversionRate": 0.0,
    }


async def test_team_listing(client, developer_employee, agent_employee):
    response = await client.get("/api/organizations/me/team", headers=_auth(developer_employee))

    assert response.status_code == 200
    assert response.json()["members"] == [
        {"id": str(agent_employee.id), "name": "Alex Tester", "email": agent_employee.email}
    ]


async def test_file_upload_validates_type(client, developer_employee, project):
    response = await client.post(
        f"/api/projects/{project.id}/files",
        data={"purpose": "image"},
        files={"file": ("plan.pdf", b"%PDF", "application/pdf")},
        headers=_auth(developer_employee),
    )

    assert response.status_code == 422
    assert "Image files" in response.json()["detail"]
