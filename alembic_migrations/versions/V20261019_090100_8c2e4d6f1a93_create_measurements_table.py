"""create_measurements_table

Revision ID: 8c2e4d6f1a93
Revises: 3f9a1c2b7d40
Create Date: 2026-10-19 09:01:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "8c2e4d6f1a93"
down_revision = "3f9a1c2b7d40"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "measurements",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("site_id", sa.UUID(), nullable=False),
        sa.Column(
            "value",
            sa.Numeric(precision=14, scale=4),
            nullable=False,
            comment="Methane reading (kg)",
        ),
        sa.Column(
            "recorded_at",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="Sensor-supplied timestamp; may arrive out of order",
        ),
        sa.Column(
            "idempotency_key",
            sa.String(length=255),
            nullable=False,
            comment="{batch_key}:{index}",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("value >= 0", name="ck_measurements_value_non_negative"),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("idempotency_key", name="uq_measurements_idempotency_key"),
        comment="Individual methane readings",
    )
    op.create_index(
        op.f("ix_measurements_site_id"),
        "measurements",
        ["site_id"],
        unique=False,
    )
    op.create_index(
        "ix_measurements_site_recorded_at",
        "measurements",
        ["site_id", "recorded_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_measurements_site_recorded_at", table_name="measurements")
    op.drop_index(op.f("ix_measurements_site_id"), table_name="measurements")
    op.drop_table("measurements")
