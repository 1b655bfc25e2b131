"""one live reservation per user

Revision ID: 7a2d4e91c3b5
Revises: 3f1c2a9b7d10
Create Date: 2026-10-25 10:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7a2d4e91c3b5'
down_revision = '3f1c2a9b7d10'
branch_labels = None
depends_on = None

LIVE = sa.text("status IN ('reserved', 'active')")


def upgrade():
    op.create_index(
        'uq_reservations_user_live', 'reservations', ['user_id'], unique=True,
        sqlite_where=LIVE, postgresql_where=LIVE
    )


def downgrade():
    op.drop_index('uq_reservations_user_live', table_name='reservations')
