from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class LeadStage(str, Enum):
    INQUIRY = "inquiry"
    SITE_VISIT = "site_visit"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED = "closed"


class LeadCreate(BaseModel):
    project_id: Optional[UUID] = None
    unit_id: Optional[UUID] = None
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: str = Field(..., min_length=1, max_length=50)
    source: Optional[str] = Field(None, max_length=100)
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    preferred_unit_types: List[str] = Field(default_factory=list)
    preferred_location: Optional[str] = Field(None, max_length=255)
    requirements: Optional[str] = None
    assigned_to: Optional[UUID] = None
    notes: Optional[str] = None
    next_followup: Optional[datetime] = None


class LeadUpdate(BaseModel):
    status: Optional[LeadStatus] = None
    stage: Optional[LeadStage] = None
    notes: Optional[str] = None
    next_followup: Optional[datetime] = None
    last_contacted: Optional[datetime] = None
    score: Optional[int] = Field(None, ge=0, le=100)
    assigned_to: Optional[UUID] = None
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    preferred_unit_types: Optional[List[str]] = None
    preferred_location: Optional[str] = Field(None, max_length=255)
    requirements: Optional[str] = None


class LeadFilters(BaseModel):
    status: Optional[LeadStatus] = None
    stage: Optional[LeadStage] = None
    project_id: Optional[UUID] = None
    assigned_to: Optional[UUID] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search: Optional[str] = None


class LeadResponse(BaseModel):
    id: UUID
    organization_id: UUID
    project_id: Optional[UUID] = None
    unit_id: Optional[UUID] = None
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: str
    source: Optional[str] = None
    status: str
    stage: str
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    preferred_unit_types: Optional[List[str]] = None
    preferred_location: Optional[str] = None
    requirements: Optional[str] = None
    assigned_to: Optional[UUID] = None
    notes: Optional[str] = None
    next_followup: Optional[datetime] = None
    last_contacted: Optional[datetime] = None
    score: Optional[int] = None
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LeadListResponse(BaseModel):
    leads: List[LeadResponse]
    total: int
    page: int
    limit: int


class LeadStatsResponse(BaseModel):
    total: int
    by_status: Dict[str, int] = Field(default_factory=dict, alias="byStatus")
    by_stage: Dict[str, int] = Field(default_factory=dict, alias="byStage")
    this_month: int = Field(0, alias="thisMonth")
    conversion_rate: float = Field(0.0, alias="conversionRate")

    class Config:
        populate_by_name = True
