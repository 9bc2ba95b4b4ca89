"""
Unit Model

Represents an individual apartment/unit within a project.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import relationship

from realty_crm.lib.database import Base, JSONType


class Unit(Base):
    __tablename__ = "units"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    unit_number = Column(String(50), nullable=False)
    unit_code = Column(String(50), nullable=True)
    tower = Column(String(255), nullable=True)
    floor_number = Column(Integer, nullable=True)
    bedrooms = Column(Integer, nullable=True)  # null = unknown
    area_total = Column(Float, nullable=True)
    area_suite = Column(Float, nullable=True)
    area_balcony = Column(Float, nullable=True)
    price = Column(Float, nullable=True)
    status = Column(String(20), default="unknown")  # available, sold, reserved, blocked, unknown
    unit_view = Column(String(255), nullable=True)
    unit_type = Column(String(100), nullable=True)
    custom_fields = Column(JSONType, default=dict)
    raw_data = Column(JSONType, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project", back_populates="units")

    __table_args__ = (
        UniqueConstraint('project_id', 'unit_number', name='uq_units_project_unit_number'),
        Index('ix_units_project_floor', 'project_id', 'floor_number'),
        Index('ix_units_status', 'status'),
    )
