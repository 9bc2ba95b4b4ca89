from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class ProjectStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class CreationMethod(str, Enum):
    MANUAL = "manual"
    AI_ASSISTED = "ai_assisted"
    HYBRID = "hybrid"
    ADMIN = "admin"


def _blank_to_none(v):
    # The UI sends "" for untouched date inputs
    if isinstance(v, str) and not v.strip():
        return None
    return v


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    project_type: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    developer_name: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    starting_price: Optional[Decimal] = Field(None, ge=0)
    total_units: Optional[int] = Field(None, ge=0)
    completion_date: Optional[date] = None
    handover_date: Optional[date] = None
    amenities: List[Any] = Field(default_factory=list)
    connectivity: List[Any] = Field(default_factory=list)
    landmarks: List[Any] = Field(default_factory=list)
    payment_plans: List[Any] = Field(default_factory=list)
    custom_attributes: Dict[str, Any] = Field(default_factory=dict)
    creation_method: CreationMethod = CreationMethod.MANUAL
    ai_confidence_score: Optional[float] = Field(None, ge=0, le=1)
    source_file_id: Optional[UUID] = None
    featured_image: Optional[str] = None
    gallery_images: List[str] = Field(default_factory=list)
    brochure_url: Optional[str] = None
    floor_plan_urls: List[str] = Field(default_factory=list)

    @field_validator('completion_date', 'handover_date', mode='before')
    @classmethod
    def empty_date_is_none(cls, v):
        return _blank_to_none(v)

    @field_validator('name', 'location')
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Field must not be empty')
        return v.strip()


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    project_type: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = None
    developer_name: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    starting_price: Optional[Decimal] = Field(None, ge=0)
    total_units: Optional[int] = Field(None, ge=0)
    completion_date: Optional[date] = None
    handover_date: Optional[date] = None
    status: Optional[ProjectStatus] = None
    amenities: Optional[List[Any]] = None
    connectivity: Optional[List[Any]] = None
    landmarks: Optional[List[Any]] = None
    payment_plans: Optional[List[Any]] = None
    custom_attributes: Optional[Dict[str, Any]] = None
    featured_image: Optional[str] = None
    gallery_images: Optional[List[str]] = None
    brochure_url: Optional[str] = None
    floor_plan_urls: Optional[List[str]] = None
    is_featured: Optional[bool] = None

    @field_validator('completion_date', 'handover_date', mode='before')
    @classmethod
    def empty_date_is_none(cls, v):
        return _blank_to_none(v)


class ProjectResponse(BaseModel):
    id: UUID
    organization_id: UUID
    created_by: Optional[UUID] = None
    name: str
    location: str
    project_type: Optional[str] = None
    description: Optional[str] = None
    developer_name: Optional[str] = None
    address: Optional[str] = None
    starting_price: Optional[Decimal] = None
    total_units: Optional[int] = None
    completion_date: Optional[date] = None
    handover_date: Optional[date] = None
    status: str
    creation_method: str
    ai_confidence_score: Optional[float] = None
    source_file_id: Optional[UUID] = None
    amenities: List[Any] = []
    connectivity: List[Any] = []
    landmarks: List[Any] = []
    payment_plans: List[Any] = []
    custom_attributes: Dict[str, Any] = {}
    featured_image: Optional[str] = None
    gallery_images: List[str] = []
    brochure_url: Optional[str] = None
    floor_plan_urls: List[str] = []
    is_featured: bool = False
    views_count: int = 0
    leads_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectListResponse(BaseModel):
    items: List[ProjectResponse]
    total: int
