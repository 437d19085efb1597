"""Relationship Engine — edge transitions against the SQL repository.

Invariants:
    - absent → add → present → remove → absent, and the pair repeats cleanly
    - add twice → DuplicateRelationshipError; remove absent → RelationshipNotFoundError
    - add to an unknown target → TargetNotFoundError; remove does not need the target
    - Storage decides under concurrency: a stale snapshot cannot double-add or
      double-remove, and cannot veto a change storage accepts
    - An actor deleted after it was read fails SoulNotFoundError, writing nothing
    - Returned snapshot is not re-read: concurrent changes are absent from it
"""

import asyncio

import pytest
from sqlalchemy import func, select

from souls.core.errors import (
    ConflictError,
    DuplicateRelationshipError,
    InvalidActionError,
    RelationshipNotFoundError,
    SoulNotFoundError,
    StateError,
    TargetNotFoundError,
    ValidationError,
)
from souls.infrastructure.soul_repository import SqlSoulRepository
from souls.models.soul_edge import SoulEdge
from souls.services.relationship_engine import RelationshipEngine
from souls.services.soul_store import SoulStore

KINDS = [
    ("addAlly", "removeAlly", "allies"),
    ("addBlock", "removeBlock", "blocks"),
    ("addHostile", "removeHostile", "hostiles"),
]


# ─── Round trip ──────────────────────────────────────────────────

@pytest.mark.parametrize("add,remove,field", KINDS)
async def test_edge_round_trip(relationship_engine, store, alice, bob, add, remove, field):
    soul = alice
    for _ in range(2):
        soul = await relationship_engine.apply(soul, add, "bob")
        assert getattr(soul, field) == {"bob"}
        stored = (await store.read({"name": "alice"}))[0]
        assert getattr(stored, field) == {"bob"}

        soul = await relationship_engine.apply(soul, remove, "bob")
        assert getattr(soul, field) == frozenset()
        stored = (await store.read({"name": "alice"}))[0]
        assert getattr(stored, field) == frozenset()


async def test_scenario_allies_list(relationship_engine, alice, bob):
    soul = await relationship_engine.apply_by_name("alice", "addAlly", "bob")
    assert sorted(soul.allies) == ["bob"]
    with pytest.raises(DuplicateRelationshipError):
        await relationship_engine.apply_by_name("alice", "addAlly", "bob")
    soul = await relationship_engine.apply_by_name("alice", "removeAlly", "bob")
    assert sorted(soul.allies) == []


# ─── Guards ──────────────────────────────────────────────────────

@pytest.mark.parametrize("add,remove,field", KINDS)
async def test_add_twice_raises_duplicate(relationship_engine, alice, bob, add, remove, field):
    soul = await relationship_engine.apply(alice, add, "bob")
    with pytest.raises(ConflictError) as exc_info:
        await relationship_engine.apply(soul, add, "bob")
    assert isinstance(exc_info.value, DuplicateRelationshipError)


@pytest.mark.parametrize("add,remove,field", KINDS)
async def test_remove_absent_raises_not_found(relationship_engine, alice, bob, add, remove, field):
    with pytest.raises(StateError) as exc_info:
        await relationship_engine.apply(alice, remove, "bob")
    assert isinstance(exc_info.value, RelationshipNotFoundError)


async def test_add_unknown_target_raises(relationship_engine, store, alice):
    with pytest.raises(TargetNotFoundError):
        await relationship_engine.apply(alice, "addAlly", "nobody")
    assert (await store.get("alice")).allies == frozenset()


async def test_remove_edge_to_deleted_target(relationship_engine, store, alice, bob):
    soul = await relationship_engine.apply(alice, "addHostile", "bob")
    await store.delete("bob")
    soul = await relationship_engine.apply(soul, "removeHostile", "bob")
    assert soul.hostiles == frozenset()


async def test_invalid_action_raises_before_io(relationship_engine, alice):
    with pytest.raises(InvalidActionError):
        await relationship_engine.apply(alice, "befriend", "bob")


async def test_blank_target_raises_validation(relationship_engine, alice):
    with pytest.raises(ValidationError):
        await relationship_engine.apply(alice, "addAlly", " ")


async def test_legacy_alias_adds_edge(relationship_engine, alice, bob):
    soul = await relationship_engine.apply(alice, "block", "bob")
    assert soul.blocks == {"bob"}


async def test_apply_by_name_unknown_actor(relationship_engine, bob):
    with pytest.raises(SoulNotFoundError):
        await relationship_engine.apply_by_name("nobody", "addAlly", "bob")


# ─── Independence of kinds ───────────────────────────────────────

async def test_target_may_be_ally_block_and_hostile(relationship_engine, store, alice, bob):
    soul = alice
    for add, _, _ in KINDS:
        soul = await relationship_engine.apply(soul, add, "bob")
    stored = await store.get("alice")
    assert stored.allies == stored.blocks == stored.hostiles == {"bob"}


async def test_removing_one_kind_keeps_others(relationship_engine, alice, bob):
    soul = await relationship_engine.apply(alice, "addAlly", "bob")
    soul = await relationship_engine.apply(soul, "addBlock", "bob")
    soul = await relationship_engine.apply(soul, "removeAlly", "bob")
    assert soul.allies == frozenset()
    assert soul.blocks == {"bob"}


# ─── Stale snapshots ─────────────────────────────────────────────

async def test_stale_snapshot_cannot_double_add(relationship_engine, store, alice, bob):
    """Two requests read alice before either writes: storage rejects the second add."""
    first, second = alice, await store.get("alice")
    await relationship_engine.apply(first, "addAlly", "bob")
    with pytest.raises(DuplicateRelationshipError):
        await relationship_engine.apply(second, "addAlly", "bob")
    assert (await store.get("alice")).allies == {"bob"}


async def test_stale_snapshot_cannot_double_remove(relationship_engine, store, alice, bob):
    soul = await relationship_engine.apply(alice, "addAlly", "bob")
    await relationship_engine.apply(soul, "removeAlly", "bob")
    with pytest.raises(RelationshipNotFoundError):
        await relationship_engine.apply(soul, "removeAlly", "bob")


async def test_returned_snapshot_omits_concurrent_change(relationship_engine, store, alice, bob):
    other = await store.create("carol", "secret3")
    stale = await store.get("alice")
    await relationship_engine.apply(alice, "addAlly", other.name)

    returned = await relationship_engine.apply(stale, "addHostile", "bob")

    assert returned.allies == frozenset()
    assert returned.hostiles == {"bob"}
    current = await store.get("alice")
    assert current.allies == {"carol"}
    assert current.hostiles == {"bob"}


async def test_stale_snapshot_with_edge_can_add_after_concurrent_remove(
    relationship_engine, store, alice, bob,
):
    stale = await relationship_engine.apply(alice, "addAlly", "bob")
    await relationship_engine.apply(await store.get("alice"), "removeAlly", "bob")

    returned = await relationship_engine.apply(stale, "addAlly", "bob")

    assert returned.allies == {"bob"}
    assert (await store.get("alice")).allies == {"bob"}


async def test_stale_snapshot_without_edge_can_remove_after_concurrent_add(
    relationship_engine, store, alice, bob,
):
    await relationship_engine.apply(await store.get("alice"), "addBlock", "bob")

    returned = await relationship_engine.apply(alice, "removeBlock", "bob")

    assert returned.blocks == frozenset()
    assert (await store.get("alice")).blocks == frozenset()


@pytest.mark.parametrize("action", ["addAlly", "removeAlly"])
async def test_deleted_actor_raises_soul_not_found(
    relationship_engine, store, test_db, alice, bob, action,
):
    await store.delete("alice")
    with pytest.raises(SoulNotFoundError) as exc_info:
        await relationship_engine.apply(alice, action, "bob")
    assert exc_info.value.name == "alice"
    count = await test_db.scalar(select(func.count()).select_from(SoulEdge))
    assert count == 0


# ─── Concurrency ─────────────────────────────────────────────────

def _engine(session, hash_params) -> RelationshipEngine:
    repository = SqlSoulRepository(session)
    return RelationshipEngine(repository, SoulStore(repository, hash_params))


async def test_concurrent_add_same_edge_one_wins(
    test_session_factory, test_db, hash_params, alice, bob,
):
    async with test_session_factory() as first, test_session_factory() as second:
        results = await asyncio.gather(
            _engine(first, hash_params).apply(alice, "addAlly", "bob"),
            _engine(second, hash_params).apply(alice, "addAlly", "bob"),
            return_exceptions=True,
        )

    applied = [r for r in results if not isinstance(r, BaseException)]
    failed = [r for r in results if isinstance(r, BaseException)]
    assert len(applied) == 1
    assert applied[0].allies == {"bob"}
    assert len(failed) == 1
    assert isinstance(failed[0], DuplicateRelationshipError)
    count = await test_db.scalar(select(func.count()).select_from(SoulEdge))
    assert count == 1


async def test_concurrent_different_edges_both_apply(
    test_session_factory, store, hash_params, alice, bob,
):
    async with test_session_factory() as first, test_session_factory() as second:
        await asyncio.gather(
            _engine(first, hash_params).apply(alice, "addAlly", "bob"),
            _engine(second, hash_params).apply(alice, "addHostile", "bob"),
        )

    stored = await store.get("alice")
    assert stored.allies == stored.hostiles == {"bob"}
