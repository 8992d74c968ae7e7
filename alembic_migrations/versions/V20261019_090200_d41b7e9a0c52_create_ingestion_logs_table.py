"""create_ingestion_logs_table

Revision ID: d41b7e9a0c52
Revises: 8c2e4d6f1a93
Create Date: 2026-10-19 09:02:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "d41b7e9a0c52"
down_revision = "8c2e4d6f1a93"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "ingestion_logs",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column(
            "batch_key",
            sa.String(length=255),
            nullable=False,
            comment="Client supplied batch identifier",
        ),
        sa.Column("site_id", sa.UUID(), nullable=False),
        sa.Column("readings_count", sa.Integer(), nullable=False),
        sa.Column(
            "total_value",
            sa.Numeric(precision=14, scale=4),
            nullable=False,
            comment="Sum of the batch's reading values (kg)",
        ),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["site_id"], ["sites.id"]),
        sa.PrimaryKeyConstraint("id"),
        # Unique index doubles as the duplicate detector's lookup path
        sa.UniqueConstraint("batch_key", name="uq_ingestion_logs_batch_key"),
        comment="Ledger of processed ingestion batches",
    )
    op.create_index(
        op.f("ix_ingestion_logs_site_id"),
        "ingestion_logs",
        ["site_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_ingestion_logs_site_id"), table_name="ingestion_logs")
    op.drop_table("ingestion_logs")
