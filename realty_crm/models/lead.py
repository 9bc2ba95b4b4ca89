import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Float, Integer, Text, ForeignKey, Index, Uuid

from realty_crm.lib.database import Base, JSONType


class Lead(Base):
    __tablename__ = "leads"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    unit_id = Column(Uuid, ForeignKey("units.id", ondelete="SET NULL"), nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=False)
    source = Column(String(100), nullable=True)
    status = Column(String(20), default="new")  # new, contacted, qualified, negotiation, won, lost
    stage = Column(String(20), default="inquiry")  # inquiry, site_visit, proposal, negotiation, closed
    budget_min = Column(Float, nullable=True)
    budget_max = Column(Float, nullable=True)
    preferred_unit_types = Column(JSONType, default=list)
    preferred_location = Column(String(255), nullable=True)
    requirements = Column(Text, nullable=True)
    assigned_to = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    next_followup = Column(DateTime, nullable=True)
    last_contacted = Column(DateTime, nullable=True)
    score = Column(Integer, nullable=True)
    created_by = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index('ix_leads_organization', 'organization_id'),
        Index('ix_leads_project', 'project_id'),
        Index('ix_leads_status', 'status'),
    )
