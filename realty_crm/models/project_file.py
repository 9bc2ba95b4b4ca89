import uuid
from datetime import datetime
from sqlalchemy import Column, String, BigInteger, DateTime, ForeignKey, Index, Uuid

from realty_crm.lib.database import Base


class ProjectFile(Base):
    """Reference to a file stored in the project-files bucket."""
    __tablename__ = "project_files"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    organization_id = Column(Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    file_name = Column(String(255), nullable=False)
    file_purpose = Column(String(20), nullable=False)  # brochure, floor_plan, unit_data, image, document
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(String(100), nullable=False)
    storage_bucket = Column(String(100), nullable=False)
    storage_path = Column(String(1024), nullable=False)
    public_url = Column(String(1024), nullable=True)
    uploaded_by = Column(Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_project_files_project', 'project_id'),
    )
