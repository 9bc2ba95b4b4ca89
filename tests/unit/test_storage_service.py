import re
import uuid

import pytest

from realty_crm.lib.errors import UpstreamServiceError
from realty_crm.services.storage_service import StorageService, sanitize_filename


def test_sanitize_filename_replaces_unsafe_characters():
    assert sanitize_filename("Price List (v2).xlsx") == "Price_List__v2_.xlsx"
    assert sanitize_filename("units-final.csv") == "units-final.csv"


def test_project_file_path_layout(storage):
    org_id = uuid.uuid4()
    project_id = uuid.uuid4()

    path = storage.get_project_file_path(org_id, project_id, "unit_data", "units sheet.xlsx")

    assert re.fullmatch(rf"{org_id}/{project_id}/unit_data/\d+_units_sheet\.xlsx", path)


def test_brochure_path_layout(storage):
    org_id = uuid.uuid4()

    path = storage.get_brochure_path(org_id, "brochure.pdf")

    assert re.fullmatch(rf"projects/{org_id}/\d+_brochure\.pdf", path)


async def test_upload_read_and_delete(storage, object_storage):
    result = await storage.upload("a/b/file.csv", b"unit_no\n1\n", "text/csv")

    assert result == {
        'storage_path': "a/b/file.csv",
        'size': 10,
        'content_type': "text/csv",
        'public_url': "https://files.test/project-files/a/b/file.csv",
    }
    assert await storage.read_file("a/b/file.csv") == b"unit_no\n1\n"

    await storage.delete("a/b/file.csv")
    assert "a/b/file.csv" not in object_storage.objects


async def test_upload_failure_propagates(object_storage):
    object_storage.fail = True
    storage = StorageService(storage=object_storage)

    with pytest.raises(UpstreamServiceError):
        await storage.upload("a/file.pdf", b"%PDF", "application/pdf")
