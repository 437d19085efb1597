"""Initial schema — souls and soul_edges.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "souls",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(64), nullable=False, unique=True),
        sa.Column("credential_salt", sa.String(64), nullable=False),
        sa.Column("credential_hash", sa.String(128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "soul_edges",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("soul_id", UUID(as_uuid=True), sa.ForeignKey("souls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("kind", sa.String(10), nullable=False),
        sa.Column("target_name", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("soul_id", "kind", "target_name", name="uq_soul_edges_soul_kind_target"),
    )
    op.create_index("ix_soul_edges_soul_id", "soul_edges", ["soul_id"])


def downgrade() -> None:
    op.drop_index("ix_soul_edges_soul_id", table_name="soul_edges")
    op.drop_table("soul_edges")
    op.drop_table("souls")
