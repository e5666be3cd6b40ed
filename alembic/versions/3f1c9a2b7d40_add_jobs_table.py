"""add_jobs_table

Revision ID: 3f1c9a2b7d40
Revises:
Create Date: 2026-10-19 09:12:44.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a2b7d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create jobs table
    op.create_table('jobs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('job_number', sa.String(length=32), nullable=False),
        sa.Column('customer', sa.String(length=128), nullable=False),
        sa.Column('site', sa.String(length=128), nullable=False),
        sa.Column('engineer', sa.String(length=128), nullable=True),
        sa.Column('contact', sa.JSON(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('job_type', sa.String(length=32), nullable=False),
        sa.Column('category', sa.String(length=32), nullable=False),
        sa.Column('priority', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('target_completion_minutes', sa.Integer(), nullable=False),
        sa.Column('date_logged', sa.DateTime(timezone=True), nullable=False),
        sa.Column('date_accepted', sa.DateTime(timezone=True), nullable=True),
        sa.Column('date_on_site', sa.DateTime(timezone=True), nullable=True),
        sa.Column('date_completed', sa.DateTime(timezone=True), nullable=True),
        sa.Column('project', sa.String(length=128), nullable=True),
        sa.Column('primary_job_trade', sa.String(length=64), nullable=True),
        sa.Column('secondary_job_trades', sa.JSON(), nullable=False),
        sa.Column('customer_order_number', sa.String(length=64), nullable=True),
        sa.Column('reference_number', sa.String(length=64), nullable=True),
        sa.Column('job_owner', sa.String(length=128), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('requires_approval', sa.Boolean(), nullable=False),
        sa.Column('job_ref_1', sa.String(length=64), nullable=True),
        sa.Column('job_ref_2', sa.String(length=64), nullable=True),
        sa.Column('preferred_appointment_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('lock_visit_date_time', sa.Boolean(), nullable=False),
        sa.Column('deploy_to_mobile', sa.Boolean(), nullable=False),
        sa.Column('is_recurring_job', sa.Boolean(), nullable=False),
        sa.Column('completion_time_from_engineer_onsite', sa.Boolean(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_number')
    )

    # Create indexes
    op.create_index('idx_jobs_status', 'jobs', ['status'])
    op.create_index('idx_jobs_date_logged', 'jobs', ['date_logged'])


def downgrade() -> None:
    """Downgrade schema."""
    # Drop indexes
    op.drop_index('idx_jobs_date_logged', 'jobs')
    op.drop_index('idx_jobs_status', 'jobs')

    # Drop table
    op.drop_table('jobs')
