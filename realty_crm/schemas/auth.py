from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class OrganizationType(str, Enum):
    DEVELOPER = "developer"
    AGENT = "agent"


class RegisterRequest(BaseModel):
    """Sign-up payload: the organization and its first (admin) employee."""
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    organization_name: str = Field(..., min_length=1, max_length=255)
    organization_type: OrganizationType
    contact_phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class OrganizationResponse(BaseModel):
    id: UUID
    name: str
    type: str
    status: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class EmployeeResponse(BaseModel):
    id: UUID
    organization_id: UUID
    user_id: UUID
    employee_code: Optional[str] = None
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    role: str
    status: str
    permissions: Optional[Dict[str, Any]] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileResponse(BaseModel):
    employee: EmployeeResponse
    organization: OrganizationResponse


class TeamMemberResponse(BaseModel):
    id: UUID
    name: str
    email: str


class TeamListResponse(BaseModel):
    members: List[TeamMemberResponse]
