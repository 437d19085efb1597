"""Soul Store — create, read, delete, and login over the SQL repository.

Invariants:
    - Duplicate create fails ConflictError regardless of the new password
    - read() with no filter returns every soul; a name filter returns at most one
    - login returns exactly {id, name}; wrong password → AuthError; unknown → NotFoundError
    - A corrupt stored credential surfaces as CorruptCredentialError
    - Every operation strips the name the way create does
    - Two sessions creating the same name at once: exactly one succeeds
"""

import asyncio
import dataclasses

import pytest
from sqlalchemy import update

from souls.core.credentials import verify_password
from souls.core.errors import (
    AuthError, ConflictError, CorruptCredentialError, NotFoundError,
    PasswordMismatchError, SoulAlreadyExistsError, SoulNotFoundError,
    ValidationError,
)
from souls.core.soul import LoginResult
from souls.infrastructure.soul_repository import SqlSoulRepository
from souls.models.soul import Soul as SoulModel
from souls.services.soul_store import SoulStore


# ─── create ──────────────────────────────────────────────────────

async def test_create_returns_stored_soul(store, hash_params):
    soul = await store.create("alice", "secret1")
    assert soul.name == "alice"
    assert soul.allies == soul.blocks == soul.hostiles == frozenset()
    assert verify_password("secret1", soul.credential, hash_params)


async def test_create_strips_name(store):
    soul = await store.create("  alice  ", "secret1")
    assert soul.name == "alice"


@pytest.mark.parametrize("password", ["secret1", "other", "secret1 "])
async def test_create_duplicate_name_fails_regardless_of_password(store, password):
    await store.create("alice", "secret1")
    with pytest.raises(ConflictError) as exc_info:
        await store.create("alice", password)
    assert isinstance(exc_info.value, SoulAlreadyExistsError)


@pytest.mark.parametrize("name,password", [
    (None, "secret1"), ("", "secret1"), ("   ", "secret1"),
    ("alice", None), ("alice", ""),
])
async def test_create_rejects_missing_parameters(store, name, password):
    with pytest.raises(ValidationError):
        await store.create(name, password)


# ─── read ────────────────────────────────────────────────────────

async def test_read_without_filter_returns_all(store, alice, bob):
    souls = await store.read()
    assert {s.name for s in souls} == {"alice", "bob"}


async def test_read_by_name_returns_one(store, alice, bob):
    souls = await store.read({"name": "bob"})
    assert [s.name for s in souls] == ["bob"]


async def test_read_by_unknown_name_returns_empty(store, alice):
    assert await store.read({"name": "nobody"}) == []


async def test_get_unknown_raises_not_found(store):
    with pytest.raises(SoulNotFoundError):
        await store.get("nobody")


# ─── delete ──────────────────────────────────────────────────────

async def test_delete_removes_soul(store, alice):
    await store.delete("alice")
    assert await store.read({"name": "alice"}) == []


async def test_delete_unknown_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await store.delete("nobody")


async def test_name_reusable_after_delete(store, alice):
    await store.delete("alice")
    again = await store.create("alice", "fresh")
    assert again.id != alice.id


# ─── login ───────────────────────────────────────────────────────

async def test_login_returns_id_and_name_only(store, alice):
    result = await store.login("alice", "secret1")
    assert isinstance(result, LoginResult)
    assert dataclasses.asdict(result) == {"id": alice.id, "name": "alice"}


async def test_login_wrong_password_raises_auth_error(store, alice):
    with pytest.raises(AuthError) as exc_info:
        await store.login("alice", "wrong")
    assert isinstance(exc_info.value, PasswordMismatchError)


async def test_login_unknown_name_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await store.login("nobody", "secret1")


async def test_login_rejects_empty_password(store, alice):
    with pytest.raises(ValidationError):
        await store.login("alice", "")


async def test_login_with_corrupt_credential_raises(store, alice, test_db):
    await test_db.execute(
        update(SoulModel).where(SoulModel.name == "alice")
        .values(credential_salt=""),
    )
    await test_db.commit()
    with pytest.raises(CorruptCredentialError):
        await store.login("alice", "secret1")


# ─── Name normalisation ──────────────────────────────────────────

async def test_padded_name_addresses_stripped_soul(store, alice):
    assert (await store.get(" alice ")).id == alice.id
    assert [s.name for s in await store.read({"name": " alice "})] == ["alice"]
    assert (await store.login(" alice ", "secret1")).id == alice.id
    await store.delete(" alice ")
    assert await store.read() == []


@pytest.mark.parametrize("name", [None, "", "   "])
async def test_get_rejects_blank_name(store, name):
    with pytest.raises(ValidationError):
        await store.get(name)


# ─── Concurrency ─────────────────────────────────────────────────

async def test_concurrent_create_same_name_one_wins(test_session_factory, hash_params):
    async with test_session_factory() as first, test_session_factory() as second:
        results = await asyncio.gather(
            SoulStore(SqlSoulRepository(first), hash_params).create("alice", "secret1"),
            SoulStore(SqlSoulRepository(second), hash_params).create("alice", "secret2"),
            return_exceptions=True,
        )

    created = [r for r in results if not isinstance(r, BaseException)]
    failed = [r for r in results if isinstance(r, BaseException)]
    assert len(created) == 1
    assert len(failed) == 1
    assert isinstance(failed[0], SoulAlreadyExistsError)

    async with test_session_factory() as session:
        stored = await SoulStore(SqlSoulRepository(session), hash_params).read()
    assert [s.name for s in stored] == ["alice"]
    assert stored[0].id == created[0].id
