"""
Unit schemas: ingestion rows, summaries and CRUD payloads.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class UnitStatus(str, Enum):
    """Unit availability status."""
    AVAILABLE = "available"
    SOLD = "sold"
    RESERVED = "reserved"
    BLOCKED = "blocked"
    UNKNOWN = "unknown"


# ============================================
# INGESTION SCHEMAS
# ============================================

class UnitRow(BaseModel):
    """One normalized spreadsheet row. Immutable once built."""
    tower: Optional[str] = None
    unit_number: Optional[str] = None
    unit_code: Optional[str] = None
    floor: Optional[int] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=10)
    bedrooms_raw: Optional[str] = None
    area_total: Optional[float] = Field(None, ge=0)
    area_suite: Optional[float] = Field(None, ge=0)
    area_balcony: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    status: UnitStatus = UnitStatus.UNKNOWN
    status_raw: Optional[str] = None
    unit_view: Optional[str] = None
    unit_type: Optional[str] = None
    raw_data: Dict[str, Any] = Field(default_factory=dict)
    custom_fields: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        frozen = True

    @property
    def has_identity(self) -> bool:
        return bool(self.unit_number or self.unit_code)


class SummaryConfidence(BaseModel):
    header_mapping: float = Field(0.0, alias="headerMapping")
    data_quality: float = Field(0.0, alias="dataQuality")
    overall: float = 0.0

    class Config:
        populate_by_name = True


class UnitSummary(BaseModel):
    """
    Aggregate view over a project's units.

    Serialized with camelCase keys; the same JSON is cached on the project.
    """
    total: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict, alias="byStatus")
    by_bedrooms: Dict[str, int] = Field(default_factory=dict, alias="byBedrooms")
    by_floor: Dict[str, int] = Field(default_factory=dict, alias="byFloor")
    by_tower: Dict[str, int] = Field(default_factory=dict, alias="byTower")
    confidence: SummaryConfidence = Field(default_factory=SummaryConfidence)

    class Config:
        populate_by_name = True

    def totals_consistent(self) -> bool:
        """Every grouping must account for each unit exactly once."""
        return all(
            sum(group.values()) == self.total
            for group in (self.by_status, self.by_bedrooms, self.by_floor, self.by_tower)
        )

    def has_only_unknown_bedrooms(self) -> bool:
        """True when the bedroom distribution carries no information."""
        keys = list(self.by_bedrooms.keys())
        all_unknown = bool(keys) and all(k == "unknown" for k in keys)
        unknown_is_total = self.by_bedrooms.get("unknown", 0) == self.total
        return all_unknown or unknown_is_total


# ============================================
# UNIT CRUD SCHEMAS
# ============================================

class UnitCreate(BaseModel):
    """Schema for creating a single unit by hand."""
    unit_number: str = Field(..., min_length=1, max_length=50)
    unit_code: Optional[str] = Field(None, max_length=50)
    tower: Optional[str] = Field(None, max_length=255)
    floor_number: Optional[int] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=10)
    area_total: Optional[float] = Field(None, ge=0)
    area_suite: Optional[float] = Field(None, ge=0)
    area_balcony: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    status: UnitStatus = UnitStatus.AVAILABLE
    unit_view: Optional[str] = Field(None, max_length=255)
    unit_type: Optional[str] = Field(None, max_length=100)
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class UnitUpdate(BaseModel):
    """Schema for updating a unit."""
    unit_number: Optional[str] = Field(None, min_length=1, max_length=50)
    unit_code: Optional[str] = Field(None, max_length=50)
    tower: Optional[str] = Field(None, max_length=255)
    floor_number: Optional[int] = None
    bedrooms: Optional[int] = Field(None, ge=0, le=10)
    area_total: Optional[float] = Field(None, ge=0)
    area_suite: Optional[float] = Field(None, ge=0)
    area_balcony: Optional[float] = Field(None, ge=0)
    price: Optional[float] = Field(None, ge=0)
    status: Optional[UnitStatus] = None
    unit_view: Optional[str] = Field(None, max_length=255)
    unit_type: Optional[str] = Field(None, max_length=100)
    custom_fields: Optional[Dict[str, Any]] = None


class UnitFilters(BaseModel):
    status: Optional[UnitStatus] = None
    bedrooms: Optional[int] = None
    tower: Optional[str] = None


class UnitResponse(BaseModel):
    id: UUID
    project_id: UUID
    unit_number: str
    unit_code: Optional[str] = None
    tower: Optional[str] = None
    floor_number: Optional[int] = None
    bedrooms: Optional[int] = None
    area_total: Optional[float] = None
    area_suite: Optional[float] = None
    area_balcony: Optional[float] = None
    price: Optional[float] = None
    status: str
    unit_view: Optional[str] = None
    unit_type: Optional[str] = None
    custom_fields: Optional[Dict[str, Any]] = None
    raw_data: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UnitListResponse(BaseModel):
    units: List[UnitResponse]
    total: int


# ============================================
# IMPORT SCHEMAS
# ============================================

class ImportPreviewResponse(BaseModel):
    """Result of running the pipeline over an uploaded sheet without saving."""
    headers: List[str]
    header_mapping: Dict[str, str]
    units: List[UnitRow]
    summary: UnitSummary
    rows_read: int
    rows_dropped: int


class ImportResultResponse(BaseModel):
    project_id: UUID
    units_saved: int
    rows_dropped: int
    header_mapping: Dict[str, str]
    summary: UnitSummary
    source_file_id: Optional[UUID] = None
