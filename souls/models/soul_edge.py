"""SoulEdge ORM — one row per present relationship edge.

Invariants:
    - (soul_id, kind, target_name) is unique: a target appears at most once per set
    - kind is one of: ally, block, hostile
    - target_name is a plain name, not a foreign key — edges may outlive their target

Design Decisions:
    - No cross-kind constraint: the same target may hold all three kinds at once
    - ondelete CASCADE on soul_id: outgoing edges die with their owner
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from souls.db.base import Base


class SoulEdge(Base):
    """Directed, labeled edge from a soul to a target name."""
    __tablename__ = "soul_edges"
    __table_args__ = (
        UniqueConstraint(
            "soul_id", "kind", "target_name",
            name="uq_soul_edges_soul_kind_target",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    soul_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("souls.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    target_name: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
