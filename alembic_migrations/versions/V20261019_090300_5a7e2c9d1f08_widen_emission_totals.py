"""widen_emission_totals

Revision ID: 5a7e2c9d1f08
Revises: d41b7e9a0c52
Create Date: 2026-10-19 09:03:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "5a7e2c9d1f08"
down_revision = "d41b7e9a0c52"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.alter_column(
        "sites",
        "total_emissions_to_date",
        existing_type=sa.Numeric(precision=14, scale=4),
        type_=sa.Numeric(precision=20, scale=4),
        existing_nullable=False,
        existing_server_default="0",
    )
    op.alter_column(
        "ingestion_logs",
        "total_value",
        existing_type=sa.Numeric(precision=14, scale=4),
        type_=sa.Numeric(precision=20, scale=4),
        existing_nullable=False,
    )


def downgrade() -> None:
    op.alter_column(
        "ingestion_logs",
        "total_value",
        existing_type=sa.Numeric(precision=20, scale=4),
        type_=sa.Numeric(precision=14, scale=4),
        existing_nullable=False,
    )
    op.alter_column(
        "sites",
        "total_emissions_to_date",
        existing_type=sa.Numeric(precision=20, scale=4),
        type_=sa.Numeric(precision=14, scale=4),
        existing_nullable=False,
        existing_server_default="0",
    )
