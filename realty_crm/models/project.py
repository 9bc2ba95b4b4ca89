import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Date, DateTime, Float, Integer, Numeric, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from realty_crm.lib.database import Base, JSONType


class Project(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    created_by = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    project_type = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    developer_name = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    starting_price = Column(Numeric(15, 2), nullable=True)
    total_units = Column(Integer, nullable=True)
    completion_date = Column(Date, nullable=True)
    handover_date = Column(Date, nullable=True)
    status = Column(String(20), default="draft")  # draft, published, archived
    creation_method = Column(String(20), default="manual")  # manual, ai_assisted, hybrid, admin
    ai_confidence_score = Column(Float, nullable=True)
    source_file_id = Column(Uuid, nullable=True)
    amenities = Column(JSONType, default=list)
    connectivity = Column(JSONType, default=list)
    landmarks = Column(JSONType, default=list)
    payment_plans = Column(JSONType, default=list)
    custom_attributes = Column(JSONType, default=dict)
    featured_image = Column(String(1024), nullable=True)
    gallery_images = Column(JSONType, default=list)
    brochure_url = Column(String(1024), nullable=True)
    floor_plan_urls = Column(JSONType, default=list)
    is_featured = Column(Boolean, default=False)
    views_count = Column(Integer, default=0)
    leads_count = Column(Integer, default=0)
    unit_summary = Column(JSONType, nullable=True)  # cached UnitSummary
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    organization = relationship("Organization", back_populates="projects")
    units = relationship("Unit", back_populates="project", cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_projects_organization', 'organization_id'),
        Index('ix_projects_status', 'status'),
    )
