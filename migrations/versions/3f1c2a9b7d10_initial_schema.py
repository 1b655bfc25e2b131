"""initial schema: areas, sections, spots, users, vehicles, reservations

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2a9b7d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'parking_areas',
        sa.Column('area_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('floors', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('area_id')
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_table(
        'parking_sections',
        sa.Column('section_id', sa.Uuid(), nullable=False),
        sa.Column('area_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('vehicle_type', sa.String(length=20), nullable=False),
        sa.Column('mode', sa.String(length=20), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('parked_count', sa.Integer(), nullable=False),
        sa.Column('reserved_count', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('parked_count >= 0', name='ck_section_parked_nonnegative'),
        sa.CheckConstraint('reserved_count >= 0', name='ck_section_reserved_nonnegative'),
        sa.CheckConstraint('parked_count + reserved_count <= capacity', name='ck_section_within_capacity'),
        sa.ForeignKeyConstraint(['area_id'], ['parking_areas.area_id']),
        sa.PrimaryKeyConstraint('section_id')
    )
    op.create_index('ix_parking_sections_area_id', 'parking_sections', ['area_id'], unique=False)
    op.create_table(
        'vehicles',
        sa.Column('vehicle_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('plate_number', sa.String(length=20), nullable=False),
        sa.Column('vehicle_type', sa.String(length=20), nullable=False),
        sa.Column('brand', sa.String(length=50), nullable=True),
        sa.Column('color', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('vehicle_id')
    )
    op.create_index('ix_vehicles_user_id', 'vehicles', ['user_id'], unique=False)
    op.create_table(
        'parking_spots',
        sa.Column('spot_id', sa.Uuid(), nullable=False),
        sa.Column('section_id', sa.Uuid(), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('spot_type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['section_id'], ['parking_sections.section_id']),
        sa.PrimaryKeyConstraint('spot_id'),
        sa.UniqueConstraint('section_id', 'number', name='uq_spot_section_number')
    )
    op.create_index('ix_parking_spots_section_id', 'parking_spots', ['section_id'], unique=False)
    op.create_table(
        'reservations',
        sa.Column('reservation_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('guest_name', sa.String(length=100), nullable=True),
        sa.Column('guest_contact', sa.String(length=100), nullable=True),
        sa.Column('guest_plate_number', sa.String(length=20), nullable=True),
        sa.Column('vehicle_id', sa.Uuid(), nullable=True),
        sa.Column('target_kind', sa.String(length=10), nullable=False),
        sa.Column('spot_id', sa.Uuid(), nullable=True),
        sa.Column('section_id', sa.Uuid(), nullable=False),
        sa.Column('pseudo_label', sa.String(length=80), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('token', sa.String(length=128), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=True),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "(target_kind = 'spot' AND spot_id IS NOT NULL) OR (target_kind = 'section' AND spot_id IS NULL)",
            name='ck_reservation_target'
        ),
        sa.CheckConstraint('user_id IS NOT NULL OR guest_name IS NOT NULL', name='ck_reservation_occupant'),
        sa.ForeignKeyConstraint(['section_id'], ['parking_sections.section_id']),
        sa.ForeignKeyConstraint(['spot_id'], ['parking_spots.spot_id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['vehicle_id'], ['vehicles.vehicle_id']),
        sa.PrimaryKeyConstraint('reservation_id'),
        sa.UniqueConstraint('token')
    )
    op.create_index('ix_reservations_section_status', 'reservations', ['section_id', 'status'], unique=False)
    op.create_index('ix_reservations_user_status', 'reservations', ['user_id', 'status'], unique=False)
    op.create_index('ix_reservations_spot_id', 'reservations', ['spot_id'], unique=False)


def downgrade():
    op.drop_index('ix_reservations_spot_id', table_name='reservations')
    op.drop_index('ix_reservations_user_status', table_name='reservations')
    op.drop_index('ix_reservations_section_status', table_name='reservations')
    op.drop_table('reservations')
    op.drop_index('ix_parking_spots_section_id', table_name='parking_spots')
    op.drop_table('parking_spots')
    op.drop_index('ix_vehicles_user_id', table_name='vehicles')
    op.drop_table('vehicles')
    op.drop_index('ix_parking_sections_area_id', table_name='parking_sections')
    op.drop_table('parking_sections')
    op.drop_table('users')
    op.drop_table('parking_areas')
