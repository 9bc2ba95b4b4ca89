import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, Date, DateTime, Float, Integer, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from realty_crm.lib.database import Base


class Promotion(Base):
    """
    Promotional campaign run by an organization, optionally for one project.

    Status flow: draft → active → paused/completed/cancelled
    """
    __tablename__ = "promotions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(255), nullable=False)
    short_message = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    promotion_type = Column(String(50), nullable=True)
    discount_percentage = Column(Float, nullable=True)
    discount_amount = Column(Float, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), default="draft")  # draft, active, paused, completed, cancelled
    terms_conditions = Column(Text, nullable=True)
    media_url = Column(String(1024), nullable=True)
    send_at = Column(DateTime, nullable=True)
    sent_at = Column(DateTime, nullable=True)
    is_scheduled = Column(Boolean, default=False)
    created_by = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    metrics = relationship("PromotionMetrics", back_populates="promotion", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        Index('ix_promotions_organization', 'organization_id'),
        Index('ix_promotions_status', 'status'),
    )


class PromotionMetrics(Base):
    __tablename__ = "promotion_metrics"

    promotion_id = Column(Uuid, ForeignKey("promotions.id", ondelete="CASCADE"), primary_key=True)
    delivered_count = Column(Integer, default=0)
    opened_count = Column(Integer, default=0)
    clicked_count = Column(Integer, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    promotion = relationship("Promotion", back_populates="metrics")
