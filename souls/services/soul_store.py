"""Soul Store — create, read, delete, and login over a SoulStorage collaborator.

Invariants:
    - create never pre-checks the name: storage.insert_unique is the arbiter
    - Names are stripped the same way by every operation, so " alice " and
      "alice" address the same soul
    - Password hashing runs in a worker thread (asyncio.to_thread): Argon2id is
      deliberately slow and must not stall the event loop
    - login returns LoginResult{id, name} only; credential material stays here
    - Passwords, salts, and hashes are never logged

Design Decisions:
    - Storage and HashParams injected via constructor: no module-level DB handle
    - read() filters pass straight to storage, which rejects unknown keys
"""

import asyncio
import logging

from souls.core.credentials import (
    DEFAULT_PARAMS, Credential, HashParams, hash_password, verify_password,
)
from souls.core.domain_types import SoulName
from souls.core.errors import (
    ErrorContext, PasswordMismatchError, SoulNotFoundError, ValidationError,
)
from souls.core.repository_protocols import SoulStorage
from souls.core.soul import LoginResult, Soul

logger = logging.getLogger(__name__)


def _require(value: str | None, field: str) -> str:
    if value is None:
        raise ValidationError(f"Missing request parameter '{field}'.", field)
    if not value.strip():
        raise ValidationError(f"Empty request parameter '{field}'.", field)
    return value


def _name(value: str | None) -> SoulName:
    return SoulName(_require(value, "name").strip())


class SoulStore:
    """Identity persistence operations."""

    def __init__(self, storage: SoulStorage, hash_params: HashParams = DEFAULT_PARAMS):
        self.storage = storage
        self.hash_params = hash_params

    async def create(self, name: str, password: str) -> Soul:
        """Persist a new soul. Raises SoulAlreadyExistsError on name collision."""
        name = _name(name)
        password = _require(password, "password")
        logger.info(f"Creating new Soul {name}", extra={"soul_name": name})
        credential = await asyncio.to_thread(
            hash_password, password, self.hash_params,
        )
        doc = await self.storage.insert_unique({
            "name": name, "credential": credential.to_document(),
        })
        return Soul.from_document(doc)

    async def read(self, filter: dict | None = None) -> list[Soul]:
        """All souls for an empty filter; at most one for a name filter."""
        filter = dict(filter or {})
        if isinstance(filter.get("name"), str):
            filter["name"] = filter["name"].strip()
        docs = await self.storage.find(filter)
        return [Soul.from_document(doc) for doc in docs]

    async def get(self, name: str) -> Soul:
        """Single soul by name or SoulNotFoundError."""
        name = _name(name)
        doc = await self.storage.find_one({"name": name})
        if doc is None:
            raise SoulNotFoundError(name)
        return Soul.from_document(doc)

    async def delete(self, name: str) -> None:
        name = _name(name)
        logger.info(f"Removing Soul {name}", extra={"soul_name": name})
        if not await self.storage.delete_one({"name": name}):
            raise SoulNotFoundError(name)

    async def login(self, name: str, password: str) -> LoginResult:
        """Verify credentials and return the minimal session projection."""
        name = _name(name)
        password = _require(password, "password")
        logger.info(f"Login for Soul {name}", extra={"soul_name": name})
        doc = await self.storage.find_one({"name": name})
        if doc is None:
            raise SoulNotFoundError(name)

        stored = Credential.from_document(doc.get("credential"))
        matched = await asyncio.to_thread(
            verify_password, password, stored, self.hash_params,
        )
        if not matched:
            logger.warning(
                f"Password mismatch for Soul {name}",
                extra={"soul_name": name, "error_code": "PASSWORD_MISMATCH"},
            )
            raise PasswordMismatchError(ErrorContext(soul_name=name))
        return LoginResult(id=doc["id"], name=SoulName(doc["name"]))
