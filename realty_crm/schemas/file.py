from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class FilePurpose(str, Enum):
    BROCHURE = "brochure"
    FLOOR_PLAN = "floor_plan"
    UNIT_DATA = "unit_data"
    IMAGE = "image"
    DOCUMENT = "document"


class ProjectFileResponse(BaseModel):
    id: UUID
    project_id: UUID
    organization_id: UUID
    file_name: str
    file_purpose: str
    file_size: int
    mime_type: str
    storage_bucket: str
    storage_path: str
    public_url: Optional[str] = None
    uploaded_by: Optional[UUID] = None
    uploaded_at: datetime

    class Config:
        from_attributes = True


class ProjectFileListResponse(BaseModel):
    files: List[ProjectFileResponse]
    total: int
