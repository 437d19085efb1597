"""Relationship Engine — applies ally/block/hostile edge transitions for an actor.

Invariants:
    - Action decoded first (InvalidActionError before any IO)
    - add requires the target to exist (TargetNotFoundError); remove does not,
      so edges to deleted souls can still be cleaned up
    - The storage result alone decides the transition; the actor snapshot is
      never consulted for it:
        APPLIED       → success
        UNCHANGED     → DuplicateRelationshipError (add) / RelationshipNotFoundError (remove)
        OWNER_MISSING → SoulNotFoundError (actor deleted after it was read)
    - Returned snapshot = input snapshot + this call's edge change; storage is
      not re-read, so concurrent writes to the same actor may be missing from it

Design Decisions:
    - No in-memory pre-check: a stale snapshot would reject an add that storage
      accepts (edge removed concurrently), and vice versa for remove
    - No transaction spans the target check and the edge write: a target deleted
      in between leaves a dangling edge (accepted race, same as deleting a
      target that already has incoming edges)
    - Self-targeting allowed: no rule forbids a soul listing itself
"""

import logging

from souls.core.domain_types import EdgeOp, EdgeWrite
from souls.core.enforce_relationships import (
    apply_edge, parse_action, require_target_name,
)
from souls.core.errors import (
    DuplicateRelationshipError,
    ErrorContext,
    RelationshipNotFoundError,
    SoulNotFoundError,
    TargetNotFoundError,
)
from souls.core.repository_protocols import SoulStorage
from souls.core.soul import Soul
from souls.services.soul_store import SoulStore

logger = logging.getLogger(__name__)


class RelationshipEngine:
    """Validates and persists relationship edge changes."""

    def __init__(self, storage: SoulStorage, store: SoulStore):
        self.storage = storage
        self.store = store

    async def apply(self, actor: Soul, action: object, target: str | None) -> Soul:
        """Apply one action to actor's edge towards target. Returns the updated snapshot."""
        parsed = parse_action(action)
        target = require_target_name(target)
        kind, op = parsed.kind, parsed.op
        ctx = ErrorContext(
            soul_name=actor.name, target_name=target, action=parsed.value,
        )

        if op is EdgeOp.ADD and await self.storage.find_one({"name": target}) is None:
            raise TargetNotFoundError(target, ctx)

        outcome = await self.storage.update_array_field(
            actor.name, op, kind.field, target,
        )
        if outcome is EdgeWrite.OWNER_MISSING:
            raise SoulNotFoundError(actor.name, ctx)
        if outcome is EdgeWrite.UNCHANGED:
            stored_present = op is EdgeOp.ADD
            if actor.has_edge(kind, target) != stored_present:
                logger.warning(
                    f"Stale snapshot for Soul {actor.name}: {parsed.value} {target} "
                    f"disagrees with storage",
                    extra={"soul_name": actor.name, "action": parsed.value},
                )
            if op is EdgeOp.ADD:
                raise DuplicateRelationshipError(target, kind.label, ctx)
            raise RelationshipNotFoundError(target, kind.label, ctx)

        logger.info(
            f"Soul {actor.name}: {parsed.value} {target}",
            extra={"soul_name": actor.name, "action": parsed.value},
        )
        return apply_edge(actor, kind, op, target)

    async def apply_by_name(
        self, actor_name: str, action: object, target: str | None,
    ) -> Soul:
        """Read the actor's current snapshot, then apply."""
        parse_action(action)
        actor = await self.store.get(actor_name)
        return await self.apply(actor, action, target)
