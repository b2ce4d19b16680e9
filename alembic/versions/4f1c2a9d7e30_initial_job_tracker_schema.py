"""initial_job_tracker_schema

Creates jobs, activities and app_users.

Revision ID: 4f1c2a9d7e30
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9d7e30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

job_status = sa.Enum('intake', 'design', 'proof', 'production', 'complete', name='jobstatus')
user_role = sa.Enum('viewer', 'staff', 'admin', name='userrole')


def upgrade() -> None:
    """Create the job tracker tables."""

    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('job_no', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('status', job_status, nullable=False, server_default='intake'),
        sa.Column('in_hands_date', sa.Date(), nullable=True),
        sa.Column('owner', sa.String(), nullable=True),
        sa.Column('priority', sa.String(), nullable=True),
        sa.Column('est_so_no', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_jobs_id', 'jobs', ['id'])
    # Ingestion upserts ON CONFLICT (job_no), which needs this unique index
    op.create_index('ix_jobs_job_no', 'jobs', ['job_no'], unique=True)
    op.create_index('ix_jobs_status', 'jobs', ['status'])
    op.create_index('ix_jobs_owner', 'jobs', ['owner'])
    op.create_index('ix_jobs_created_at', 'jobs', ['created_at'])

    op.create_table(
        'activities',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('job_id', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(), nullable=False, server_default='email'),
        sa.Column('snippet', sa.Text(), nullable=True),
        sa.Column('gmail_link', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_activities_id', 'activities', ['id'])
    op.create_index('ix_activities_job_id', 'activities', ['job_id'])

    op.create_table(
        'app_users',
        sa.Column('id', sa.String(), primary_key=True, nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('role', user_role, nullable=False, server_default='staff'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_app_users_email', 'app_users', ['email'])


def downgrade() -> None:
    """Drop the job tracker tables."""
    op.drop_index('ix_app_users_email', table_name='app_users')
    op.drop_table('app_users')

    op.drop_index('ix_activities_job_id', table_name='activities')
    op.drop_index('ix_activities_id', table_name='activities')
    op.drop_table('activities')

    op.drop_index('ix_jobs_created_at', table_name='jobs')
    op.drop_index('ix_jobs_owner', table_name='jobs')
    op.drop_index('ix_jobs_status', table_name='jobs')
    op.drop_index('ix_jobs_job_no', table_name='jobs')
    op.drop_index('ix_jobs_id', table_name='jobs')
    op.drop_table('jobs')

    user_role.drop(op.get_bind(), checkfirst=True)
    job_status.drop(op.get_bind(), checkfirst=True)
