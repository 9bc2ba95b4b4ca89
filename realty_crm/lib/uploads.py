from fastapi import UploadFile

from realty_crm.lib.config import settings
from realty_crm.lib.errors import ValidationError


async def read_upload(file: UploadFile, max_bytes: int = None) -> bytes:
    """Read an uploaded file, rejecting empty or oversized ones."""
    limit = max_bytes or settings.max_import_file_bytes
    content = await file.read(limit + 1)
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > limit:
        raise ValidationError(f"File exceeds the {limit // (1024 * 1024)} MB upload limit")
    return content
