"""Initial schema - clients, admins, content, analytics, projects

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

Creates every table used by the database storage backend.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TS = sa.DateTime(timezone=True)


def _id() -> sa.Column:
    return sa.Column('id', sa.String(36), primary_key=True)


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [sa.Column('created_at', TS, nullable=False)]
    if updated:
        columns.append(sa.Column('updated_at', TS, nullable=False))
    return columns


def upgrade() -> None:
    # ==========================================================================
    # Clients
    # ==========================================================================
    op.create_table(
        'clients',
        _id(),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('company', sa.String(255)),
        sa.Column('phone', sa.String(50)),
        *_timestamps(),
    )
    op.create_table(
        'client_sessions',
        _id(),
        sa.Column('token_hash', sa.String(64), nullable=False, unique=True),
        sa.Column('client_id', sa.String(36),
                  sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('expires_at', TS, nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index('idx_client_sessions_expires', 'client_sessions', ['expires_at'])

    # ==========================================================================
    # Admins & roles
    # ==========================================================================
    op.create_table(
        'admin_roles',
        _id(),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text),
        sa.Column('permissions', sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_table(
        'admins',
        _id(),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('role_id', sa.String(36), sa.ForeignKey('admin_roles.id'), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', TS),
        *_timestamps(),
    )
    op.create_table(
        'admin_sessions',
        _id(),
        sa.Column('token_hash', sa.String(64), nullable=False, unique=True),
        sa.Column('admin_id', sa.String(36),
                  sa.ForeignKey('admins.id', ondelete='CASCADE'), nullable=False),
        sa.Column('expires_at', TS, nullable=False),
        sa.Column('ip_address', sa.String(45)),
        sa.Column('user_agent', sa.String(500)),
        *_timestamps(updated=False),
    )
    op.create_index('idx_admin_sessions_expires', 'admin_sessions', ['expires_at'])

    # ==========================================================================
    # Marketing content
    # ==========================================================================
    op.create_table(
        'blog_posts',
        _id(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('excerpt', sa.Text, nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('image_url', sa.String(500)),
        sa.Column('published', sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_table(
        'contact_submissions',
        _id(),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('service', sa.String(100), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        *_timestamps(updated=False),
    )

    # ==========================================================================
    # Analytics
    # ==========================================================================
    op.create_table(
        'page_views',
        _id(),
        sa.Column('path', sa.String(500), nullable=False),
        sa.Column('user_agent', sa.String(500)),
        sa.Column('referrer', sa.String(500)),
        sa.Column('ip', sa.String(45)),
        sa.Column('timestamp', TS, nullable=False),
    )
    op.create_index('idx_page_views_timestamp', 'page_views', ['timestamp'])
    op.create_index('idx_page_views_ip', 'page_views', ['ip', 'timestamp'])
    op.create_table(
        'website_metrics',
        _id(),
        sa.Column('date', sa.String(10), nullable=False, unique=True),
        sa.Column('total_views', sa.Integer, nullable=False, server_default='0'),
        sa.Column('unique_visitors', sa.Integer, nullable=False, server_default='0'),
        sa.Column('bounce_rate', sa.Integer, nullable=False, server_default='0'),
        sa.Column('avg_session_duration', sa.Integer, nullable=False, server_default='0'),
        sa.Column('top_pages', sa.JSON, nullable=False),
        sa.Column('top_referrers', sa.JSON, nullable=False),
        *_timestamps(),
    )

    # ==========================================================================
    # Projects
    # ==========================================================================
    op.create_table(
        'projects',
        _id(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('client_id', sa.String(36),
                  sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('budget', sa.Integer),
        sa.Column('start_date', TS),
        sa.Column('end_date', TS),
        sa.Column('completed_at', TS),
        *_timestamps(),
    )
    op.create_index('idx_projects_client', 'projects', ['client_id', 'created_at'])
    op.create_table(
        'project_milestones',
        _id(),
        sa.Column('project_id', sa.String(36),
                  sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('due_date', TS),
        sa.Column('completed_at', TS),
        sa.Column('order', sa.Integer, nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_project_milestones_project_id', 'project_milestones', ['project_id'])
    op.create_table(
        'project_tasks',
        _id(),
        sa.Column('project_id', sa.String(36),
                  sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('milestone_id', sa.String(36),
                  sa.ForeignKey('project_milestones.id', ondelete='SET NULL')),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('status', sa.String(20), nullable=False, server_default='todo'),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('estimated_hours', sa.Integer),
        sa.Column('actual_hours', sa.Integer),
        sa.Column('due_date', TS),
        sa.Column('completed_at', TS),
        sa.Column('order', sa.Integer, nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_project_tasks_project_id', 'project_tasks', ['project_id'])
    op.create_table(
        'project_comments',
        _id(),
        sa.Column('project_id', sa.String(36),
                  sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('task_id', sa.String(36),
                  sa.ForeignKey('project_tasks.id', ondelete='CASCADE')),
        sa.Column('milestone_id', sa.String(36),
                  sa.ForeignKey('project_milestones.id', ondelete='CASCADE')),
        sa.Column('author_id', sa.String(36), nullable=False),
        sa.Column('author_type', sa.String(20), nullable=False, server_default='client'),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('is_internal', sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_project_comments_project_id', 'project_comments', ['project_id'])

    # ==========================================================================
    # Notifications & files
    # ==========================================================================
    op.create_table(
        'notifications',
        _id(),
        sa.Column('recipient_id', sa.String(36), nullable=False),
        sa.Column('recipient_type', sa.String(20), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text, nullable=False),
        sa.Column('type', sa.String(20), nullable=False, server_default='info'),
        sa.Column('is_read', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.String(36)),
        *_timestamps(updated=False),
    )
    op.create_index(
        'idx_notifications_recipient', 'notifications',
        ['recipient_type', 'recipient_id', 'created_at'],
    )
    op.create_table(
        'file_uploads',
        _id(),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('original_name', sa.String(255), nullable=False),
        sa.Column('mimetype', sa.String(100), nullable=False),
        sa.Column('size', sa.Integer, nullable=False),
        sa.Column('path', sa.String(500), nullable=False),
        sa.Column('category', sa.String(50)),
        sa.Column('uploaded_by', sa.String(36), nullable=False),
        *_timestamps(updated=False),
    )


def downgrade() -> None:
    for table in (
        'file_uploads',
        'notifications',
        'project_comments',
        'project_tasks',
        'project_milestones',
        'projects',
        'website_metrics',
        'page_views',
        'contact_submissions',
        'blog_posts',
        'admin_sessions',
        'admins',
        'admin_roles',
        'client_sessions',
        'clients',
    ):
        op.drop_table(table)
