from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PromotionStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PromotionCreate(BaseModel):
    project_id: Optional[UUID] = None
    title: str = Field(..., min_length=1, max_length=255)
    short_message: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    promotion_type: Optional[str] = Field(None, max_length=50)
    discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    discount_amount: Optional[float] = Field(None, ge=0)
    start_date: date
    end_date: date
    terms_conditions: Optional[str] = None
    media_url: Optional[str] = None
    send_at: Optional[datetime] = None
    is_scheduled: bool = False


class PromotionUpdate(BaseModel):
    project_id: Optional[UUID] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    short_message: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    promotion_type: Optional[str] = Field(None, max_length=50)
    discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    discount_amount: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[PromotionStatus] = None
    terms_conditions: Optional[str] = None
    media_url: Optional[str] = None
    send_at: Optional[datetime] = None
    is_scheduled: Optional[bool] = None


class PromotionResponse(BaseModel):
    id: UUID
    organization_id: UUID
    project_id: Optional[UUID] = None
    title: str
    short_message: Optional[str] = None
    description: Optional[str] = None
    promotion_type: Optional[str] = None
    discount_percentage: Optional[float] = None
    discount_amount: Optional[float] = None
    start_date: date
    end_date: date
    status: str
    terms_conditions: Optional[str] = None
    media_url: Optional[str] = None
    send_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    is_scheduled: bool = False
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PromotionListResponse(BaseModel):
    items: List[PromotionResponse]
    total: int


class PromotionMetricsResponse(BaseModel):
    promotion_id: UUID
    delivered_count: int
    opened_count: int
    clicked_count: int
    updated_at: datetime

    class Config:
        from_attributes = True
