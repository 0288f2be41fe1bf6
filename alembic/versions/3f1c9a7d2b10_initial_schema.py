"""initial schema

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "3f1c9a7d2b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "consumers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("address", sa.Text, nullable=False, server_default=""),
        sa.Column("phone", sa.Text, nullable=False, server_default=""),
        sa.Column("meter_number", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.Text, nullable=True),
    )

    op.create_table(
        "meter_readings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("consumer_id", sa.Integer, sa.ForeignKey("consumers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("taken_at", sa.Text, nullable=False),
        sa.Column("units", sa.Integer, nullable=False),
    )
    op.create_index("ix_meter_readings_consumer_taken_at", "meter_readings", ["consumer_id", "taken_at"])

    op.create_table(
        "bills",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("consumer_id", sa.Integer, sa.ForeignKey("consumers.id"), nullable=False),
        sa.Column("period", sa.String(7), nullable=False),
        sa.Column("units_consumed", sa.Integer, nullable=False, server_default="0"),
        sa.Column("energy_charge", sa.Text, nullable=False, server_default="0"),
        sa.Column("fixed_charge", sa.Text, nullable=False, server_default="0"),
        sa.Column("tax_rate", sa.Text, nullable=False, server_default="0"),
        sa.Column("tax_amount", sa.Text, nullable=False, server_default="0"),
        sa.Column("total", sa.Text, nullable=False, server_default="0"),
        sa.Column("generated_at", sa.Text, nullable=True),
        sa.Column("paid", sa.Integer, nullable=False, server_default="0"),
        sa.Column("paid_at", sa.Text, nullable=True),
        sa.UniqueConstraint("consumer_id", "period", name="uq_bills_consumer_period"),
    )

    op.create_table(
        "tariffs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("slabs", sa.Text, nullable=False),
        sa.Column("fixed_charge", sa.Text, nullable=False),
        sa.Column("tax_rate", sa.Text, nullable=False),
        sa.Column("updated_at", sa.Text, nullable=True),
    )

    op.create_table(
        "id_sequences",
        sa.Column("name", sa.String(50), primary_key=True),
        sa.Column("next_value", sa.Integer, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("id_sequences")
    op.drop_table("tariffs")
    op.drop_table("bills")
    op.drop_index("ix_meter_readings_consumer_taken_at", table_name="meter_readings")
    op.drop_table("meter_readings")
    op.drop_table("consumers")
