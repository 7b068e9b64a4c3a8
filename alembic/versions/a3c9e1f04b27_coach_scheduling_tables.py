"""coach scheduling tables

Revision ID: a3c9e1f04b27
Revises:
Create Date: 2026-10-19 10:12:44.318202

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a3c9e1f04b27'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # coach_id WITH = inside a gist exclusion needs btree_gist
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist;")
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto;")

    # 1. availability_rules
    op.create_table(
        'availability_rules',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('coach_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('day_of_week', sa.Integer, nullable=False),
        sa.Column('start_time', sa.Time, nullable=False),
        sa.Column('end_time', sa.Time, nullable=False),
        sa.Column('timezone', sa.String(64), nullable=False, server_default='UTC'),
        sa.Column('effective_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('start_time < end_time', name='check_rule_time_order'),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='check_rule_day_of_week'),
        sa.CheckConstraint('end_date IS NULL OR end_date >= effective_date', name='check_rule_date_range'),
    )
    op.create_index('idx_availability_rules_coach_day', 'availability_rules', ['coach_id', 'day_of_week', 'is_active'])

    # 2. coach_packages
    op.create_table(
        'coach_packages',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('coach_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('duration_minutes', sa.Integer, nullable=False, server_default='60'),
        sa.Column('price', sa.Numeric(10, 2), nullable=True),
        sa.Column('is_active', sa.Boolean, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('ix_coach_packages_coach_id', 'coach_packages', ['coach_id'])
    op.create_index('ix_coach_packages_is_active', 'coach_packages', ['is_active'])

    # 3. bookings
    op.create_table(
        'bookings',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('coach_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('package_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('coach_packages.id'), nullable=True),
        sa.Column('scheduled_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('scheduled_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer, nullable=False),
        sa.Column('location_type', sa.String(20), server_default='virtual'),
        sa.Column('client_notes', sa.Text, nullable=True),
        sa.Column('price_paid', sa.Numeric(10, 2), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='scheduled'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('scheduled_end > scheduled_start', name='check_booking_time_order'),
        sa.CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'completed', 'cancelled')",
            name='check_booking_status'
        ),
    )
    op.create_index('ix_bookings_client_id', 'bookings', ['client_id'])
    op.create_index('idx_bookings_coach_start', 'bookings', ['coach_id', 'scheduled_start'])

    op.execute(
        """
        ALTER TABLE bookings
          ADD CONSTRAINT bookings_no_overlap_per_coach
          EXCLUDE USING gist (
            coach_id WITH =,
            tstzrange(scheduled_start, scheduled_end, '[)') WITH &&
          )
          WHERE (status IN ('scheduled', 'confirmed'))
        """
    )

    # 4. payments
    op.create_table(
        'payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('booking_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('bookings.id'), nullable=False, unique=True),
        sa.Column('client_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('coach_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('platform_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='usd'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('payment_metadata', postgresql.JSONB, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('payments')
    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS bookings_no_overlap_per_coach")
    op.drop_index('idx_bookings_coach_start', table_name='bookings')
    op.drop_index('ix_bookings_client_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_coach_packages_is_active', table_name='coach_packages')
    op.drop_index('ix_coach_packages_coach_id', table_name='coach_packages')
    op.drop_table('coach_packages')
    op.drop_index('idx_availability_rules_coach_day', table_name='availability_rules')
    op.drop_table('availability_rules')
