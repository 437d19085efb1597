"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Documents follow the persisted record layout:
      {id, name, credential: {salt, hash}, allies, blocks, hostiles, created_at}

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Every mutating method is atomic on its own; no method spans two writes
      that callers could observe half-applied
    - update_array_field reports an EdgeWrite and delete_one a bool instead of
      raising: callers map them to the domain error that fits their operation
"""

from typing import Any, Protocol

from souls.core.domain_types import EdgeOp, EdgeWrite


class SoulStorage(Protocol):
    """Contract for soul persistence — implemented by shell."""
    async def find_one(self, filter: dict[str, Any]) -> dict | None: ...
    async def find(self, filter: dict[str, Any] | None = None) -> list[dict]: ...
    async def insert_unique(self, document: dict) -> dict: ...
    async def update_array_field(
        self, name: str, op: EdgeOp, field: str, value: str,
    ) -> EdgeWrite: ...
    async def delete_one(self, filter: dict[str, Any]) -> bool: ...
