"""booking table

Revision ID: 3c1f0a9d2b7e
Revises:
Create Date: 2025-11-12 09:14:22.480311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "booking",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False, server_default="booking"),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("color", sa.String(length=32), nullable=True),
        sa.CheckConstraint("start_date <= end_date", name="ck_booking_date_order"),
        sa.CheckConstraint("type IN ('booking', 'wish')", name="ck_booking_type"),
    )
    op.create_index("ix_booking_dates", "booking", ["start_date", "end_date"])


def downgrade() -> None:
    op.drop_index("ix_booking_dates", table_name="booking")
    op.drop_table("booking")
