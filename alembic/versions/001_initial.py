"""Initial migration

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create restaurants table (current_layout_id FK added once layouts exists)
    op.create_table(
        'restaurants',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('timezone', sa.String(50), default='America/New_York'),
        sa.Column('is_active', sa.Boolean(), default=True),
        sa.Column('current_layout_id', sa.Integer()),
        sa.Column('default_service_time', sa.String(5)),
        sa.Column('default_seating_minutes', sa.Integer()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create layouts table
    op.create_table(
        'layouts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_foreign_key(
        'fk_restaurants_current_layout',
        'restaurants', 'layouts',
        ['current_layout_id'], ['id'],
    )

    # Create seat_sections table
    op.create_table(
        'seat_sections',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('layout_id', sa.Integer(), sa.ForeignKey('layouts.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('section_type', sa.String(20), default='counter'),
        sa.Column('orientation', sa.String(20), default='vertical'),
        sa.Column('floor_number', sa.Integer(), default=1),
        sa.Column('offset_x', sa.Integer(), default=0),
        sa.Column('offset_y', sa.Integer(), default=0),
        sa.Column('sort_order', sa.Integer(), default=0),
    )

    # Create seats table
    op.create_table(
        'seats',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('seat_section_id', sa.Integer(), sa.ForeignKey('seat_sections.id'), nullable=False),
        sa.Column('label', sa.String(50), nullable=False),
        sa.Column('position_x', sa.Integer(), default=0),
        sa.Column('position_y', sa.Integer(), default=0),
        sa.Column('capacity', sa.Integer(), default=1),
        sa.Column('sort_order', sa.Integer(), default=0),
        sa.UniqueConstraint('seat_section_id', 'label', name='uq_seat_section_label'),
        sa.CheckConstraint('capacity >= 1', name='check_seat_capacity_positive'),
    )

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('contact_name', sa.String(255), nullable=False),
        sa.Column('contact_phone', sa.String(20)),
        sa.Column('contact_email', sa.String(255)),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True)),
        sa.Column('duration_minutes', sa.Integer(), default=60),
        sa.Column('status', sa.String(50), default='booked'),
        sa.Column('seat_preferences', sa.JSON()),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create waitlist_entries table
    op.create_table(
        'waitlist_entries',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id'), nullable=False),
        sa.Column('contact_name', sa.String(255), nullable=False),
        sa.Column('contact_phone', sa.String(20)),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('check_in_time', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('status', sa.String(50), default='waiting'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Create seat_allocations table
    op.create_table(
        'seat_allocations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('seat_id', sa.Integer(), sa.ForeignKey('seats.id'), nullable=False),
        sa.Column('occupant_type', sa.String(20), nullable=False),
        sa.Column('occupant_id', sa.Integer(), nullable=False),
        sa.Column('occupant_name', sa.String(255)),
        sa.Column('occupant_party_size', sa.Integer()),
        sa.Column('occupant_status', sa.String(50), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('released_at', sa.DateTime(timezone=True)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('end_time > start_time', name='check_allocation_window'),
    )

    # No two active allocations of one seat may overlap, across processes too
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
    op.execute(
        """
        ALTER TABLE seat_allocations
        ADD CONSTRAINT excl_seat_allocations_active_overlap
        EXCLUDE USING gist (
            seat_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (released_at IS NULL)
        """
    )

    # Create indexes
    op.create_index('ix_layouts_restaurant_id', 'layouts', ['restaurant_id'])
    op.create_index('ix_seat_sections_layout_id', 'seat_sections', ['layout_id'])
    op.create_index('ix_reservations_restaurant_id', 'reservations', ['restaurant_id'])
    op.create_index('ix_reservations_start_time', 'reservations', ['start_time'])
    op.create_index('ix_waitlist_entries_restaurant_id', 'waitlist_entries', ['restaurant_id'])
    op.create_index(
        'ix_seat_allocations_seat_window',
        'seat_allocations',
        ['seat_id', 'start_time', 'end_time'],
    )
    op.create_index(
        'ix_seat_allocations_occupant',
        'seat_allocations',
        ['occupant_type', 'occupant_id'],
    )


def downgrade() -> None:
    op.drop_table('seat_allocations')
    op.drop_table('waitlist_entries')
    op.drop_table('reservations')
    op.drop_table('seats')
    op.drop_table('seat_sections')
    op.drop_constraint('fk_restaurants_current_layout', 'restaurants', type_='foreignkey')
    op.drop_table('layouts')
    op.drop_table('restaurants')
