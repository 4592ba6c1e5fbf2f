"""Create the sync_entity table.

Revision ID: 0001_create_sync_entity
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_create_sync_entity"
down_revision = None
branch_labels = None
depends_on = None

ASSET_TYPES = (
    "SERVER",
    "SITE",
    "PROJECT",
    "WORKBOOK",
    "WORKSHEET",
    "DATA_SOURCE",
    "REPORT_ATTRIBUTE",
)
STATUS_FLAGS = ("NEW", "ACTIVE", "UPDATED", "DELETED")
PROPAGATION_STATUSES = ("NOT_SYNCED", "SYNCED", "PENDING_UPDATE", "PENDING_DELETE")


def upgrade() -> None:
    op.create_table(
        "sync_entity",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column(
            "asset_type",
            sa.Enum(*ASSET_TYPES, name="assettype", native_enum=False),
            nullable=False,
        ),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("scope", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("tracked_fields", sa.Text(), nullable=False),
        sa.Column("attributes", sa.Text(), nullable=False),
        sa.Column("fingerprint", sa.String(length=64), nullable=True),
        sa.Column(
            "status_flag",
            sa.Enum(*STATUS_FLAGS, name="statusflag", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "propagation_status",
            sa.Enum(*PROPAGATION_STATUSES, name="propagationstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("parent", sa.String(), nullable=True),
        sa.Column("relations", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sync_entity")),
        sa.UniqueConstraint(
            "asset_type", "external_id", "scope", name="uq_sync_entity_identity"
        ),
    )
    op.create_index(
        "ix_sync_entity_propagation",
        "sync_entity",
        ["asset_type", "propagation_status"],
    )


def downgrade() -> None:
    op.drop_index("ix_sync_entity_propagation", table_name="sync_entity")
    op.drop_table("sync_entity")
