"""Create users, user_types, tokens, properties and bookings tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

This migration creates the account, one-time code, property and booking
tables.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the core tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('full_name', sa.String(200), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone_number', sa.String(30), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reset_password_token', sa.String(255), nullable=True),
        sa.Column('reset_password_expires', sa.DateTime(), nullable=True),
        sa.Column('university', sa.String(255), nullable=True),
        sa.Column('year_of_study', sa.String(10), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_phone_number', 'users', ['phone_number'], unique=True)

    op.create_table(
        'user_types',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('type', sa.Enum('student', 'agent', 'admin', name='user_role'), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', name='uq_user_types_user_id'),
        sa.ForeignKeyConstraint(
            ['user_id'],
            ['users.id'],
            name='fk_user_types_user_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_user_types_type', 'user_types', ['type'])
    op.create_index('ix_user_types_user_type', 'user_types', ['user_id', 'type'])

    op.create_table(
        'tokens',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column(
            'purpose',
            sa.Enum('emailVerification', 'login', 'resetPassword', name='token_purpose'),
            nullable=False
        ),
        sa.Column('token', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column(
            'status',
            sa.Enum('pending', 'verified', 'expired', name='token_status'),
            nullable=False,
            server_default='pending'
        ),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['user_id'],
            ['users.id'],
            name='fk_tokens_user_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_tokens_user_id', 'tokens', ['user_id'])
    op.create_index('ix_tokens_purpose', 'tokens', ['purpose'])
    op.create_index('ix_tokens_expires_at', 'tokens', ['expires_at'])
    op.create_index('ix_tokens_code_lookup', 'tokens', ['token', 'purpose', 'status'])
    op.create_index('ix_tokens_email_lookup', 'tokens', ['email', 'purpose', 'status'])
    op.create_index('ix_tokens_email_created', 'tokens', ['email', 'created_at'])

    op.create_table(
        'properties',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('room_type', sa.String(100), nullable=True),
        sa.Column('images', sa.Text(), nullable=True),
        sa.Column('amenities', sa.Text(), nullable=True),
        sa.Column('agent_id', sa.String(36), nullable=True),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['agent_id'],
            ['users.id'],
            name='fk_properties_agent_id',
            ondelete='SET NULL'
        ),
    )
    op.create_index('ix_properties_agent_id', 'properties', ['agent_id'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('property_id', sa.String(36), nullable=False),
        sa.Column('agent_id', sa.String(36), nullable=False),
        sa.Column('tenant_id', sa.String(36), nullable=False),
        sa.Column('property_type', sa.String(100), nullable=False),
        sa.Column('move_in_date', sa.Date(), nullable=False),
        sa.Column('move_out_date', sa.Date(), nullable=True),
        sa.Column('duration', sa.String(100), nullable=False),
        sa.Column('gender', sa.Enum('male', 'female', name='booking_gender'), nullable=False),
        sa.Column('special_request', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'status',
            sa.Enum('pending', 'confirmed', 'cancelled', 'completed', name='booking_status'),
            nullable=False,
            server_default='pending'
        ),
        sa.Column(
            'payment_status',
            sa.Enum('pending', 'paid', 'refunded', name='booking_payment_status'),
            nullable=False,
            server_default='pending'
        ),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['property_id'],
            ['properties.id'],
            name='fk_bookings_property_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['agent_id'],
            ['users.id'],
            name='fk_bookings_agent_id',
            ondelete='NO ACTION'
        ),
        sa.ForeignKeyConstraint(
            ['tenant_id'],
            ['users.id'],
            name='fk_bookings_tenant_id',
            ondelete='NO ACTION'
        ),
    )

    # Create indexes for common queries
    op.create_index('ix_bookings_property_id', 'bookings', ['property_id'])
    op.create_index('ix_bookings_agent_id', 'bookings', ['agent_id'])
    op.create_index('ix_bookings_tenant_id', 'bookings', ['tenant_id'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('ix_bookings_agent_created', 'bookings', ['agent_id', 'created_at'])
    op.create_index('ix_bookings_tenant_created', 'bookings', ['tenant_id', 'created_at'])


def downgrade() -> None:
    """Drop the core tables."""
    op.drop_table('bookings')
    op.drop_table('properties')
    op.drop_table('tokens')
    op.drop_table('user_types')
    op.drop_table('users')
