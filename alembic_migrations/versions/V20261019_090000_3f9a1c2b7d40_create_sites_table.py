"""create_sites_table

Revision ID: 3f9a1c2b7d40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3f9a1c2b7d40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sites",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column(
            "name",
            sa.String(length=255),
            nullable=False,
            comment="Human readable site name",
        ),
        sa.Column(
            "location",
            sa.String(length=255),
            nullable=False,
            comment="Free-form location description",
        ),
        sa.Column("latitude", sa.Numeric(precision=9, scale=6), nullable=True),
        sa.Column("longitude", sa.Numeric(precision=9, scale=6), nullable=True),
        sa.Column(
            "emission_limit",
            sa.Numeric(precision=14, scale=4),
            nullable=False,
            comment="Maximum allowed emissions (kg) set by the regulator",
        ),
        sa.Column(
            "total_emissions_to_date",
            sa.Numeric(precision=14, scale=4),
            server_default="0",
            nullable=False,
            comment="Running total of all ingested readings (kg)",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("emission_limit > 0", name="ck_sites_emission_limit_positive"),
        sa.CheckConstraint(
            "total_emissions_to_date >= 0", name="ck_sites_total_emissions_non_negative"
        ),
        sa.PrimaryKeyConstraint("id"),
        comment="Monitored sites with running emission totals",
    )


def downgrade() -> None:
    op.drop_table("sites")
