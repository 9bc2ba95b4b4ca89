"""initial_crm_schema

Revision ID: 3b1f0c9a7d21
Revises:
Create Date: 2026-10-19

Creates the CRM tables:
- organizations / employees: tenants and their staff
- projects: property projects with a cached unit summary
- units: apartments, unique per (project_id, unit_number)
- promotions / promotion_metrics: campaigns and delivery counters
- leads: prospective buyers
- project_files: uploaded files in object storage
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3b1f0c9a7d21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column():
    return sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
    ]


def upgrade() -> None:
    # === ORGANIZATIONS TABLE ===
    op.create_table(
        'organizations',
        _id_column(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), server_default='active'),
        sa.Column('contact_email', sa.String(255), nullable=True),
        sa.Column('contact_phone', sa.String(50), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('website', sa.String(255), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
    )

    # === EMPLOYEES TABLE ===
    op.create_table(
        'employees',
        _id_column(),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column('employee_code', sa.String(50), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('role', sa.String(20), server_default='agent'),
        sa.Column('status', sa.String(20), server_default='active'),
        sa.Column('permissions', postgresql.JSONB, server_default='{}'),
        sa.Column('last_login', sa.DateTime, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_employees_organization', 'employees', ['organization_id'])

    # === PROJECTS TABLE ===
    op.create_table(
        'projects',
        _id_column(),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('project_type', sa.String(50), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('developer_name', sa.String(255), nullable=True),
        sa.Column('address', sa.Text, nullable=True),
        sa.Column('starting_price', sa.Numeric(15, 2), nullable=True),
        sa.Column('total_units', sa.Integer, nullable=True),
        sa.Column('completion_date', sa.Date, nullable=True),
        sa.Column('handover_date', sa.Date, nullable=True),
        sa.Column('status', sa.String(20), server_default='draft'),
        sa.Column('creation_method', sa.String(20), server_default='manual'),
        sa.Column('ai_confidence_score', sa.Float, nullable=True),
        sa.Column('source_file_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('amenities', postgresql.JSONB, server_default='[]'),
        sa.Column('connectivity', postgresql.JSONB, server_default='[]'),
        sa.Column('landmarks', postgresql.JSONB, server_default='[]'),
        sa.Column('payment_plans', postgresql.JSONB, server_default='[]'),
        sa.Column('custom_attributes', postgresql.JSONB, server_default='{}'),
        sa.Column('featured_image', sa.String(1024), nullable=True),
        sa.Column('gallery_images', postgresql.JSONB, server_default='[]'),
        sa.Column('brochure_url', sa.String(1024), nullable=True),
        sa.Column('floor_plan_urls', postgresql.JSONB, server_default='[]'),
        sa.Column('is_featured', sa.Boolean, server_default='false'),
        sa.Column('views_count', sa.Integer, server_default='0'),
        sa.Column('leads_count', sa.Integer, server_default='0'),
        sa.Column('unit_summary', postgresql.JSONB, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_projects_organization', 'projects', ['organization_id'])
    op.create_index('ix_projects_status', 'projects', ['status'])

    # === UNITS TABLE ===
    op.create_table(
        'units',
        _id_column(),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('unit_number', sa.String(50), nullable=False),
        sa.Column('unit_code', sa.String(50), nullable=True),
        sa.Column('tower', sa.String(255), nullable=True),
        sa.Column('floor_number', sa.Integer, nullable=True),
        sa.Column('bedrooms', sa.Integer, nullable=True),
        sa.Column('area_total', sa.Float, nullable=True),
        sa.Column('area_suite', sa.Float, nullable=True),
        sa.Column('area_balcony', sa.Float, nullable=True),
        sa.Column('price', sa.Float, nullable=True),
        sa.Column('status', sa.String(20), server_default='unknown'),
        sa.Column('unit_view', sa.String(255), nullable=True),
        sa.Column('unit_type', sa.String(100), nullable=True),
        sa.Column('custom_fields', postgresql.JSONB, server_default='{}'),
        sa.Column('raw_data', postgresql.JSONB, server_default='{}'),
        *_timestamps(),
        sa.UniqueConstraint('project_id', 'unit_number', name='uq_units_project_unit_number'),
    )
    op.create_index('ix_units_project_floor', 'units', ['project_id', 'floor_number'])
    op.create_index('ix_units_status', 'units', ['status'])

    # === PROMOTIONS TABLE ===
    op.create_table(
        'promotions',
        _id_column(),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('short_message', sa.String(500), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('promotion_type', sa.String(50), nullable=True),
        sa.Column('discount_percentage', sa.Float, nullable=True),
        sa.Column('discount_amount', sa.Float, nullable=True),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('status', sa.String(20), server_default='draft'),
        sa.Column('terms_conditions', sa.Text, nullable=True),
        sa.Column('media_url', sa.String(1024), nullable=True),
        sa.Column('send_at', sa.DateTime, nullable=True),
        sa.Column('sent_at', sa.DateTime, nullable=True),
        sa.Column('is_scheduled', sa.Boolean, server_default='false'),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_promotions_organization', 'promotions', ['organization_id'])
    op.create_index('ix_promotions_status', 'promotions', ['status'])

    # === PROMOTION METRICS TABLE ===
    op.create_table(
        'promotion_metrics',
        sa.Column('promotion_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('promotions.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('delivered_count', sa.Integer, server_default='0'),
        sa.Column('opened_count', sa.Integer, server_default='0'),
        sa.Column('clicked_count', sa.Integer, server_default='0'),
        sa.Column('updated_at', sa.DateTime, server_default=sa.text('NOW()')),
    )

    # === LEADS TABLE ===
    op.create_table(
        'leads',
        _id_column(),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='SET NULL'), nullable=True),
        sa.Column('unit_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('units.id', ondelete='SET NULL'), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('source', sa.String(100), nullable=True),
        sa.Column('status', sa.String(20), server_default='new'),
        sa.Column('stage', sa.String(20), server_default='inquiry'),
        sa.Column('budget_min', sa.Float, nullable=True),
        sa.Column('budget_max', sa.Float, nullable=True),
        sa.Column('preferred_unit_types', postgresql.JSONB, server_default='[]'),
        sa.Column('preferred_location', sa.String(255), nullable=True),
        sa.Column('requirements', sa.Text, nullable=True),
        sa.Column('assigned_to', postgresql.UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('next_followup', sa.DateTime, nullable=True),
        sa.Column('last_contacted', sa.DateTime, nullable=True),
        sa.Column('score', sa.Integer, nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_leads_organization', 'leads', ['organization_id'])
    op.create_index('ix_leads_project', 'leads', ['project_id'])
    op.create_index('ix_leads_status', 'leads', ['status'])

    # === PROJECT FILES TABLE ===
    op.create_table(
        'project_files',
        _id_column(),
        sa.Column('project_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_purpose', sa.String(20), nullable=False),
        sa.Column('file_size', sa.BigInteger, nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('storage_bucket', sa.String(100), nullable=False),
        sa.Column('storage_path', sa.String(1024), nullable=False),
        sa.Column('public_url', sa.String(1024), nullable=True),
        sa.Column('uploaded_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('employees.id', ondelete='SET NULL'), nullable=True),
        sa.Column('uploaded_at', sa.DateTime, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_project_files_project', 'project_files', ['project_id'])


def downgrade() -> None:
    op.drop_table('project_files')
    op.drop_table('leads')
    op.drop_table('promotion_metrics')
    op.drop_table('promotions')
    op.drop_table('units')
    op.drop_table('projects')
    op.drop_table('employees')
    op.drop_table('organizations')
