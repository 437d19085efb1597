"""Soul Repository — SQL implementation of the SoulStorage boundary protocol.

Invariants:
    - insert_unique is a single INSERT .. ON CONFLICT DO NOTHING .. RETURNING:
      the unique index on souls.name decides collisions, never a pre-read
    - update_array_field resolves the owner id, then issues one INSERT (add) or
      DELETE (remove) on soul_edges; it reports UNCHANGED when no row changed
      and OWNER_MISSING when no soul carries the name
    - Each mutating call commits on its own — atomic per call, no cross-call transaction
    - Reads go through Core selects, never the ORM identity map, so a read after
      a mutation in the same session sees the stored state

Design Decisions:
    - Dialect-specific insert (postgresql / sqlite) for ON CONFLICT support;
      both are exercised (asyncpg in production, aiosqlite in tests)
    - Filters restricted to FILTER_KEYS: prevents arbitrary queries from leaking
      through the boundary (ADR: security)
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from souls.core.domain_types import EdgeOp, EdgeWrite, RelationshipKind
from souls.core.errors import (
    SoulAlreadyExistsError, StorageError, ValidationError,
)
from souls.models.soul import Soul as SoulModel
from souls.models.soul_edge import SoulEdge

logger = logging.getLogger(__name__)

FILTER_KEYS: frozenset[str] = frozenset({"id", "name"})

_souls = SoulModel.__table__
_edges = SoulEdge.__table__
_FIELD_KINDS = {kind.field: kind for kind in RelationshipKind}


class SqlSoulRepository:
    """Soul persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ────────────────────────────────────────────────────

    async def find_one(self, filter: dict[str, Any]) -> dict | None:
        docs = await self.find(filter)
        return docs[0] if docs else None

    async def find(self, filter: dict[str, Any] | None = None) -> list[dict]:
        query = select(_souls).order_by(_souls.c.created_at, _souls.c.name)
        for condition in _conditions(filter):
            query = query.where(condition)
        rows = (await self.db.execute(query)).mappings().all()
        if not rows:
            return []

        docs = {row["id"]: _to_document(row) for row in rows}
        edge_rows = (await self.db.execute(
            select(_edges.c.soul_id, _edges.c.kind, _edges.c.target_name)
            .where(_edges.c.soul_id.in_(list(docs))),
        )).all()
        for soul_id, kind, target in edge_rows:
            docs[soul_id][RelationshipKind(kind).field].append(target)
        return list(docs.values())

    # ─── Writes ───────────────────────────────────────────────────

    async def insert_unique(self, document: dict) -> dict:
        """Insert a new soul; raise SoulAlreadyExistsError on name collision."""
        credential = document["credential"]
        values = {
            "id": document.get("id") or uuid.uuid4(),
            "name": document["name"],
            "credential_salt": credential["salt"],
            "credential_hash": credential["hash"],
            "created_at": datetime.now(timezone.utc),
        }
        stmt = (
            self._insert(_souls).values(**values)
            .on_conflict_do_nothing(index_elements=[_souls.c.name])
            .returning(_souls.c.id)
        )
        row = (await self.db.execute(stmt)).first()
        await self.db.commit()
        if row is None:
            raise SoulAlreadyExistsError(document["name"])
        logger.info(f"Soul {values['name']} inserted", extra={"soul_name": values["name"]})
        return {
            "id": row[0],
            "name": values["name"],
            "credential": {
                "salt": values["credential_salt"],
                "hash": values["credential_hash"],
            },
            "allies": [],
            "blocks": [],
            "hostiles": [],
            "created_at": values["created_at"],
        }

    async def update_array_field(
        self, name: str, op: EdgeOp, field: str, value: str,
    ) -> EdgeWrite:
        """Add or remove one member of a soul's relationship set."""
        kind = _FIELD_KINDS.get(field)
        if kind is None:
            raise ValidationError(f"Unknown relationship field '{field}'", "field")
        soul_id = await self.db.scalar(
            select(_souls.c.id).where(_souls.c.name == name),
        )
        if soul_id is None:
            return EdgeWrite.OWNER_MISSING

        if op is EdgeOp.ADD:
            stmt = (
                self._insert(_edges).values(
                    id=uuid.uuid4(), soul_id=soul_id, kind=kind.value,
                    target_name=value, created_at=datetime.now(timezone.utc),
                )
                .on_conflict_do_nothing()
                .returning(_edges.c.id)
            )
        else:
            stmt = (
                delete(_edges)
                .where(_edges.c.soul_id == soul_id)
                .where(_edges.c.kind == kind.value)
                .where(_edges.c.target_name == value)
                .returning(_edges.c.id)
            )
        try:
            changed = (await self.db.execute(stmt)).first() is not None
            await self.db.commit()
        except IntegrityError:
            # Owner deleted between the id lookup and the insert (FK violation)
            await self.db.rollback()
            return EdgeWrite.OWNER_MISSING
        return EdgeWrite.APPLIED if changed else EdgeWrite.UNCHANGED

    async def delete_one(self, filter: dict[str, Any]) -> bool:
        """Delete one soul and its outgoing edges. False if nothing matched."""
        conditions = _conditions(filter)
        if not conditions:
            raise ValidationError("delete_one requires a filter", "filter")
        matched = select(_souls.c.id)
        for condition in conditions:
            matched = matched.where(condition)

        # Explicit edge delete: SQLite does not enforce ON DELETE CASCADE by default
        await self.db.execute(
            delete(_edges).where(_edges.c.soul_id.in_(matched)),
        )
        stmt = delete(_souls)
        for condition in conditions:
            stmt = stmt.where(condition)
        row = (await self.db.execute(stmt.returning(_souls.c.id))).first()
        await self.db.commit()
        return row is not None

    # ─── Helpers ──────────────────────────────────────────────────

    def _insert(self, table):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(table)
        if dialect == "sqlite":
            return sqlite.insert(table)
        raise StorageError(f"dialect '{dialect}' has no upsert support", "insert")


def _conditions(filter: dict[str, Any] | None) -> list:
    if not filter:
        return []
    unknown = set(filter) - FILTER_KEYS
    if unknown:
        raise ValidationError(
            f"Unsupported filter field(s): {', '.join(sorted(unknown))}",
            "filter",
        )
    return [_souls.c[key] == value for key, value in filter.items()]


def _to_document(row) -> dict:
    return {
        "id": row["id"],
        "name": row["name"],
        "credential": {
            "salt": row["credential_salt"],
            "hash": row["credential_hash"],
        },
        "allies": [],
        "blocks": [],
        "hostiles": [],
        "created_at": row["created_at"],
    }
