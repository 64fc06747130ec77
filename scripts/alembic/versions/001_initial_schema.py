"""Initial schema with users, businesses, incentives, verification requests

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create initial database schema."""
    # Create enum types
    op.execute("CREATE TYPE discounttype AS ENUM ('percentage', 'dollar')")
    op.execute("CREATE TYPE verificationstatus AS ENUM ('pending', 'verified', 'denied')")

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('service_type', sa.String(length=2), nullable=True),
        sa.Column('military_branch', sa.String(length=50), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('telegram_user_id', sa.BigInteger(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('telegram_user_id'),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    # Create businesses table
    op.create_table(
        'businesses',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('address1', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('address2', sa.String(length=200), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('state', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('zip_code', sa.String(length=20), nullable=False, server_default=''),
        sa.Column('latitude', sa.Numeric(precision=9, scale=6), nullable=True),
        sa.Column('longitude', sa.Numeric(precision=9, scale=6), nullable=True),
        sa.Column('business_type', sa.String(length=50), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('google_place_id', sa.String(length=300), nullable=True),
        sa.Column('chain_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('is_chain', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('NOT (is_chain AND chain_id IS NOT NULL)', name='check_chain_role'),
        sa.ForeignKeyConstraint(['chain_id'], ['businesses.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('google_place_id'),
    )
    op.create_index('ix_businesses_name_city_state', 'businesses', ['name', 'city', 'state'])
    op.create_index('ix_businesses_chain_id', 'businesses', ['chain_id'])
    op.create_index('ix_businesses_status', 'businesses', ['status'])
    op.create_index('ix_businesses_location', 'businesses', ['latitude', 'longitude'])

    # Create incentives table
    op.create_table(
        'incentives',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('business_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('eligible_categories', sa.JSON(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('discount_type', postgresql.ENUM('percentage', 'dollar', name='discounttype', create_type=False), nullable=False),
        sa.Column('information', sa.Text(), nullable=True),
        sa.Column('other_description', sa.Text(), nullable=False, server_default=''),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('amount >= 0', name='check_incentive_amount'),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_incentives_business_available', 'incentives', ['business_id', 'is_available'])

    # Create chain_incentives table
    op.create_table(
        'chain_incentives',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('chain_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('eligible_categories', sa.JSON(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('discount_type', postgresql.ENUM('percentage', 'dollar', name='discounttype', create_type=False), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('information', sa.Text(), nullable=True),
        sa.Column('other_description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('amount >= 0 AND amount <= 100', name='check_chain_incentive_amount'),
        sa.ForeignKeyConstraint(['chain_id'], ['businesses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_chain_incentives_chain_active', 'chain_incentives', ['chain_id', 'is_active'])

    # Create verification_requests table
    op.create_table(
        'verification_requests',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('service_type', sa.String(length=2), nullable=True),
        sa.Column('military_branch', sa.String(length=50), nullable=True),
        sa.Column('documents', sa.JSON(), nullable=False),
        sa.Column('status', postgresql.ENUM('pending', 'verified', 'denied', name='verificationstatus', create_type=False), nullable=False),
        sa.Column('reviewer_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.String(length=100), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(
        'ix_verification_requests_status_created',
        'verification_requests',
        ['status', 'created_at'],
    )


def downgrade() -> None:
    """Drop all tables and types."""
    op.drop_table('verification_requests')
    op.drop_table('chain_incentives')
    op.drop_table('incentives')
    op.drop_table('businesses')
    op.drop_table('users')

    op.execute('DROP TYPE IF EXISTS verificationstatus')
    op.execute('DROP TYPE IF EXISTS discounttype')
