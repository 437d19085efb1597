"""Relationship Routes — ally/block/hostile edge updates for a named soul.

Invariants:
    - The actor is read fresh for each request; the response is the actor
      snapshot after this single change (not re-read)
    - Action decoding and all guards live in RelationshipEngine

Design Decisions:
    - Actor named in the path: session handling lives outside this service
    - Reuses get_soul_store from soul_lifecycle so both routers share one
      store per request
"""

import logging

from fastapi import APIRouter, Depends

from souls.api.routes.soul_lifecycle import get_soul_store
from souls.schemas.soul import RelationshipUpdate, SoulView
from souls.services.relationship_engine import RelationshipEngine
from souls.services.soul_store import SoulStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/souls", tags=["relationships"])


def get_relationship_engine(
    store: SoulStore = Depends(get_soul_store),
) -> RelationshipEngine:
    return RelationshipEngine(store.storage, store)


@router.post("/{name}/relationships", response_model=SoulView)
async def update_relationship(
    name: str,
    body: RelationshipUpdate,
    engine: RelationshipEngine = Depends(get_relationship_engine),
):
    """Add or remove an ally, block, or hostile edge from soul `name`."""
    soul = await engine.apply_by_name(name, body.action, body.target)
    return SoulView.from_soul(soul)
