"""
Storage Service

High-level storage operations with organization/project-aware paths.
Wraps the object storage adapter with business logic for project files.
"""
import re
import time
from typing import Any, Dict
from uuid import UUID

from realty_crm.infra.object_storage import ObjectStorageAdapter, object_storage


def sanitize_filename(filename: str) -> str:
    """Replace anything but letters, digits, dots and dashes with underscores."""
    return re.sub(r"[^a-zA-Z0-9.-]", "_", filename or "file")


class StorageService:
    """
    Project-aware storage service.

    Path conventions:
    - Project files: {organization_id}/{project_id}/{purpose}/{timestamp}_{filename}
    - Brochures at project creation: projects/{organization_id}/{timestamp}_{filename}
    """

    def __init__(self, storage: ObjectStorageAdapter = None):
        self.storage = storage or object_storage

    @property
    def bucket(self) -> str:
        return self.storage.bucket

    # --- Path Generation ---

    def get_project_file_path(
        self,
        organization_id: UUID,
        project_id: UUID,
        purpose: str,
        filename: str,
    ) -> str:
        """Generate storage path for a project file."""
        timestamp = int(time.time() * 1000)
        return f"{organization_id}/{project_id}/{purpose}/{timestamp}_{sanitize_filename(filename)}"

    def get_brochure_path(self, organization_id: UUID, filename: str) -> str:
        """Generate storage path for a brochure uploaded before the project exists."""
        timestamp = int(time.time() * 1000)
        return f"projects/{organization_id}/{timestamp}_{sanitize_filename(filename)}"

    # --- Upload Operations ---

    async def upload(
        self,
        storage_path: str,
        content: bytes,
        content_type: str,
    ) -> Dict[str, Any]:
        """
        Upload file directly (server-side).

        Returns:
            {
                'storage_path': where the file is stored,
                'size': file size,
                'content_type': MIME type,
                'public_url': URL the UI can link to
            }
        """
        result = await self.storage.upload_file(
            key=storage_path,
            body=content,
            content_type=content_type,
        )

        return {
            'storage_path': storage_path,
            'size': result['size'],
            'content_type': content_type,
            'public_url': self.storage.get_public_url(storage_path),
        }

    # --- File Management ---

    async def read_file(self, storage_path: str) -> bytes:
        """Download and return file content."""
        return await self.storage.download_file(storage_path)

    async def delete(self, storage_path: str) -> bool:
        """Delete file from storage."""
        return await self.storage.delete_file(storage_path)


# Singleton instance
storage_service = StorageService()


async def get_storage() -> StorageService:
    """FastAPI dependency for storage service."""
    return storage_service
