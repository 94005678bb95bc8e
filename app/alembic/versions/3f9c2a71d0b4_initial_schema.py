"""initial schema

Revision ID: 3f9c2a71d0b4
Revises:
Create Date: 2026-10-18 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '3f9c2a71d0b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE = sa.Enum('citizen', 'staff', 'admin', name='role', native_enum=False, length=15)
PRIORITY = sa.Enum('normal', 'high', name='priority', native_enum=False, length=15)
ISSUE_STATUS = sa.Enum('pending', 'in-progress', 'resolved', 'rejected', name='issuestatus', native_enum=False, length=15)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('photo_url', sa.String(), nullable=False),
        sa.Column('phone', sa.String(length=31), nullable=False),
        sa.Column('role', ROLE, nullable=False),
        sa.Column('is_premium', sa.Boolean(), nullable=False),
        sa.Column('is_blocked', sa.Boolean(), nullable=False),
        sa.Column('issue_count', sa.Integer(), nullable=False),
        sa.Column('provider_uid', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'issues',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=63), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('image', sa.String(), nullable=False),
        sa.Column('priority', PRIORITY, nullable=False),
        sa.Column('status', ISSUE_STATUS, nullable=False),
        sa.Column('reported_by', sa.String(length=255), nullable=False),
        sa.Column('reported_by_name', sa.String(length=255), nullable=False),
        sa.Column('reported_by_photo_url', sa.String(), nullable=False),
        sa.Column('assigned_email', sa.String(length=255), nullable=True),
        sa.Column('assigned_name', sa.String(length=255), nullable=True),
        sa.Column('assigned_photo_url', sa.String(), nullable=True),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
        sa.Column('upvote_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_issues_category'), 'issues', ['category'], unique=False)
    op.create_index(op.f('ix_issues_status'), 'issues', ['status'], unique=False)
    op.create_index(op.f('ix_issues_reported_by'), 'issues', ['reported_by'], unique=False)
    op.create_index(op.f('ix_issues_assigned_email'), 'issues', ['assigned_email'], unique=False)
    op.create_index(op.f('ix_issues_created_at'), 'issues', ['created_at'], unique=False)

    op.create_table(
        'issue_timeline',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('issue_id', sa.String(length=32), nullable=False),
        sa.Column('status', ISSUE_STATUS, nullable=False),
        sa.Column('message', sa.String(length=255), nullable=False),
        sa.Column('updated_by', sa.String(length=255), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['issue_id'], ['issues.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_issue_timeline_issue_id'), 'issue_timeline', ['issue_id'], unique=False)

    op.create_table(
        'issue_upvotes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('issue_id', sa.String(length=32), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['issue_id'], ['issues.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('issue_id', 'email', name='uq_issue_upvotes_issue_email')
    )

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('method', sa.String(length=63), nullable=False),
        sa.Column('transaction_id', sa.String(length=255), nullable=False),
        sa.Column('month_key', sa.String(length=7), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_payments_email'), 'payments', ['email'], unique=False)
    op.create_index(op.f('ix_payments_month_key'), 'payments', ['month_key'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_payments_month_key'), table_name='payments')
    op.drop_index(op.f('ix_payments_email'), table_name='payments')
    op.drop_table('payments')
    op.drop_table('issue_upvotes')
    op.drop_index(op.f('ix_issue_timeline_issue_id'), table_name='issue_timeline')
    op.drop_table('issue_timeline')
    op.drop_index(op.f('ix_issues_created_at'), table_name='issues')
    op.drop_index(op.f('ix_issues_assigned_email'), table_name='issues')
    op.drop_index(op.f('ix_issues_reported_by'), table_name='issues')
    op.drop_index(op.f('ix_issues_status'), table_name='issues')
    op.drop_index(op.f('ix_issues_category'), table_name='issues')
    op.drop_table('issues')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
