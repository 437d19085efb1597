"""Soul ORM — persists identity records and their credential pair.

Invariants:
    - id is UUID primary key (client-side default)
    - name is unique and non-nullable; the unique index is the only arbiter
      of name collisions (no application pre-check)
    - credential_salt / credential_hash hold hex strings, never plaintext

Design Decisions:
    - Relationship sets normalized into soul_edges: row insert/delete gives
      atomic add-to-set / remove-from-set on both PostgreSQL and SQLite
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from souls.db.base import Base


class Soul(Base):
    """Stored identity — owns its outgoing relationship edges."""
    __tablename__ = "souls"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(64), nullable=False, unique=True,
    )
    credential_salt: Mapped[str] = mapped_column(String(64), nullable=False)
    credential_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
