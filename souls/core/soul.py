"""Soul Record — immutable identity snapshot plus its public projections.

Invariants:
    - Soul is frozen: relationship changes produce a new snapshot (with_edge / without_edge)
    - Each relationship set is a frozenset — a target appears at most once per set
    - No exclusivity across sets: a target may be ally, block, and hostile at once
    - LoginResult carries only {id, name}; credential material never leaves the store

Design Decisions:
    - Plain data, no persistence methods: storage is passed to services explicitly
    - from_document() is the single decoder for the persisted record layout
    - Sets sorted on to_public(): deterministic JSON without implying stored order
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping

from souls.core.credentials import Credential
from souls.core.domain_types import RelationshipKind, SoulId, SoulName


@dataclass(frozen=True)
class Soul:
    """Snapshot of a stored identity."""
    id: SoulId
    name: SoulName
    credential: Credential = field(repr=False)
    allies: frozenset[str] = frozenset()
    blocks: frozenset[str] = frozenset()
    hostiles: frozenset[str] = frozenset()
    created_at: datetime | None = None

    def edges(self, kind: RelationshipKind) -> frozenset[str]:
        return getattr(self, kind.field)

    def has_edge(self, kind: RelationshipKind, target: str) -> bool:
        return target in self.edges(kind)

    def with_edge(self, kind: RelationshipKind, target: str) -> "Soul":
        return replace(self, **{kind.field: self.edges(kind) | {target}})

    def without_edge(self, kind: RelationshipKind, target: str) -> "Soul":
        return replace(self, **{kind.field: self.edges(kind) - {target}})

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Soul":
        """Decode the persisted record layout. Credential shape checked lazily on login."""
        cred = doc.get("credential") or {}
        return cls(
            id=SoulId(doc["id"]),
            name=SoulName(doc["name"]),
            credential=Credential(
                salt=cred.get("salt", ""), hash=cred.get("hash", ""),
            ),
            allies=frozenset(doc.get("allies", ())),
            blocks=frozenset(doc.get("blocks", ())),
            hostiles=frozenset(doc.get("hostiles", ())),
            created_at=doc.get("created_at"),
        )

    def to_public(self) -> dict:
        """Projection without credential material."""
        return {
            "id": self.id,
            "name": self.name,
            "allies": sorted(self.allies),
            "blocks": sorted(self.blocks),
            "hostiles": sorted(self.hostiles),
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class LoginResult:
    """Minimal identity projection handed to the session layer."""
    id: SoulId
    name: SoulName
