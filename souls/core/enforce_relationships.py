"""Relationship Enforcement — action decoding and snapshot edge toggles.

Invariants:
    - parse_action is the only place raw action strings are decoded
    - apply_edge is PURE: returns a new snapshot, never mutates its input
    - Each (kind) edge is an independent present/absent toggle
    - Target existence is NOT checked here (needs IO — shell responsibility)

Design Decisions:
    - No duplicate/missing guard on the snapshot: the storage result decides
      that, since a snapshot can be stale (see RelationshipEngine)
    - Block and hostile reuse the ally rules verbatim — no per-kind branches
"""

from souls.core.domain_types import (
    ACTION_ALIASES, EdgeOp, RelationshipAction, RelationshipKind,
)
from souls.core.errors import InvalidActionError, ValidationError
from souls.core.soul import Soul


def parse_action(action: object) -> RelationshipAction:
    """Decode a raw action value, accepting legacy aliases."""
    if isinstance(action, RelationshipAction):
        return action
    if isinstance(action, str):
        if action in ACTION_ALIASES:
            return ACTION_ALIASES[action]
        try:
            return RelationshipAction(action)
        except ValueError:
            pass
    raise InvalidActionError(action)


def require_target_name(target: str | None) -> str:
    """Reject missing or blank target names."""
    if target is None or not target.strip():
        raise ValidationError("Missing target soul name.", "target")
    return target


def apply_edge(
    soul: Soul, kind: RelationshipKind, op: EdgeOp, target: str,
) -> Soul:
    """Return the snapshot with the edge toggled."""
    if op is EdgeOp.ADD:
        return soul.with_edge(kind, target)
    return soul.without_edge(kind, target)
