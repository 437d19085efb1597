"""Soul Lifecycle — create, read, delete, and login routes.

Invariants:
    - Routes contain no business logic: they build services and translate schemas
    - Domain errors propagate as SoulsError to the global handler (no try/except here)
    - No response ever includes credential material

Design Decisions:
    - Services built per request from the injected AsyncSession (no shared state)
    - /login declared before /{name} routes so the literal path wins
    - get_soul_store exported for reuse by relationships (DRY over duplication)
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from souls.config import get_settings
from souls.core.errors import SoulNotFoundError
from souls.infrastructure.database import get_db
from souls.infrastructure.soul_repository import SqlSoulRepository
from souls.schemas.soul import (
    LoginRequest, LoginResponse, SoulCreate, SoulView,
)
from souls.services.soul_store import SoulStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/souls", tags=["souls"])


def get_soul_store(db: AsyncSession = Depends(get_db)) -> SoulStore:
    """Store over a per-request session. Exported for relationships."""
    return SoulStore(SqlSoulRepository(db), get_settings().hash_params())


@router.post(
    "", response_model=SoulView, status_code=status.HTTP_201_CREATED,
)
async def create_soul(
    body: SoulCreate, store: SoulStore = Depends(get_soul_store),
):
    """Create a new soul."""
    soul = await store.create(body.name, body.password)
    return SoulView.from_soul(soul)


@router.get("", response_model=list[SoulView])
async def list_souls(
    name: str | None = Query(None, min_length=1, max_length=64),
    store: SoulStore = Depends(get_soul_store),
):
    """List every soul, or the one matching ?name=."""
    souls = await store.read({"name": name} if name else None)
    return [SoulView.from_soul(s) for s in souls]


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest, store: SoulStore = Depends(get_soul_store),
):
    """Check credentials and return {id, name}."""
    result = await store.login(body.name, body.password)
    return LoginResponse.from_result(result)


@router.get("/{name}", response_model=SoulView)
async def get_soul(name: str, store: SoulStore = Depends(get_soul_store)):
    """Get one soul by name."""
    souls = await store.read({"name": name})
    if not souls:
        raise SoulNotFoundError(name)
    return SoulView.from_soul(souls[0])


@router.delete("/{name}")
async def delete_soul(name: str, store: SoulStore = Depends(get_soul_store)):
    """Delete a soul and its outgoing edges."""
    await store.delete(name)
    return {"message": f"Soul {name} was deleted."}

