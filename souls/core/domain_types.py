"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SoulId wraps UUID, SoulName wraps str — never use bare primitives in domain logic
    - Each RelationshipKind maps to exactly one persisted set field (allies, blocks, hostiles)
    - Each RelationshipAction decodes to exactly one (kind, op) pair
    - All valid states encoded as Enums — no raw string matching outside ACTION_ALIASES

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Legacy action spellings ("ally", "block", "hostile") kept as aliases so
      clients of the first API version keep working
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

SoulId = NewType("SoulId", UUID)
SoulName = NewType("SoulName", str)


# ─── Enums ───────────────────────────────────────────────────────

class RelationshipKind(str, Enum):
    """The three independent edge labels between two souls."""
    ALLY = "ally"
    BLOCK = "block"
    HOSTILE = "hostile"

    @property
    def field(self) -> str:
        """Name of the persisted set holding edges of this kind."""
        return _KIND_FIELDS[self]

    @property
    def label(self) -> str:
        """Human-readable list name used in error messages."""
        return _KIND_LABELS[self]


_KIND_FIELDS = {
    RelationshipKind.ALLY: "allies",
    RelationshipKind.BLOCK: "blocks",
    RelationshipKind.HOSTILE: "hostiles",
}

_KIND_LABELS = {
    RelationshipKind.ALLY: "allies",
    RelationshipKind.BLOCK: "blocked",
    RelationshipKind.HOSTILE: "hostiles",
}


class EdgeOp(str, Enum):
    """Set mutation applied to a persisted relationship field."""
    ADD = "add"
    REMOVE = "remove"


class EdgeWrite(str, Enum):
    """Outcome of one persisted edge mutation."""
    APPLIED = "applied"
    UNCHANGED = "unchanged"  # edge already present (add) or absent (remove)
    OWNER_MISSING = "owner_missing"  # no soul stored under the actor name


class RelationshipAction(str, Enum):
    """Actions accepted by the relationship engine."""
    ADD_ALLY = "addAlly"
    REMOVE_ALLY = "removeAlly"
    ADD_BLOCK = "addBlock"
    REMOVE_BLOCK = "removeBlock"
    ADD_HOSTILE = "addHostile"
    REMOVE_HOSTILE = "removeHostile"

    @property
    def kind(self) -> RelationshipKind:
        return _ACTION_TABLE[self][0]

    @property
    def op(self) -> EdgeOp:
        return _ACTION_TABLE[self][1]


_ACTION_TABLE = {
    RelationshipAction.ADD_ALLY: (RelationshipKind.ALLY, EdgeOp.ADD),
    RelationshipAction.REMOVE_ALLY: (RelationshipKind.ALLY, EdgeOp.REMOVE),
    RelationshipAction.ADD_BLOCK: (RelationshipKind.BLOCK, EdgeOp.ADD),
    RelationshipAction.REMOVE_BLOCK: (RelationshipKind.BLOCK, EdgeOp.REMOVE),
    RelationshipAction.ADD_HOSTILE: (RelationshipKind.HOSTILE, EdgeOp.ADD),
    RelationshipAction.REMOVE_HOSTILE: (RelationshipKind.HOSTILE, EdgeOp.REMOVE),
}

# First API version spelled the add actions without a verb
ACTION_ALIASES: dict[str, RelationshipAction] = {
    "ally": RelationshipAction.ADD_ALLY,
    "block": RelationshipAction.ADD_BLOCK,
    "hostile": RelationshipAction.ADD_HOSTILE,
}

RELATIONSHIP_FIELDS: tuple[str, ...] = tuple(_KIND_FIELDS.values())
