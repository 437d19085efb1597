"""Soul Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - SoulCreate / LoginRequest: name 1-64 chars, stripped, non-empty; password non-blank
    - SoulView never carries credential material
    - RelationshipUpdate.action is a free string: decoding (and InvalidActionError)
      belongs to the relationship engine, not the schema

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
    - from_soul() is the single projection point from the core record
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from souls.core.soul import LoginResult, Soul


class _Credentials(BaseModel):
    name: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=256)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    @field_validator("password")
    @classmethod
    def reject_blank_password(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("password cannot be empty or whitespace")
        return v


class SoulCreate(_Credentials):
    """Soul creation request."""


class LoginRequest(_Credentials):
    """Login request."""


class LoginResponse(BaseModel):
    """Minimal identity projection — exactly {id, name}."""
    id: UUID
    name: str

    @classmethod
    def from_result(cls, result: LoginResult) -> "LoginResponse":
        return cls(id=result.id, name=result.name)


class RelationshipUpdate(BaseModel):
    """Relationship change for the soul named in the path."""
    action: str = Field(min_length=1, max_length=32)
    target: str = Field(min_length=1, max_length=64)


class SoulView(BaseModel):
    """Soul response — public-facing soul data."""
    id: UUID
    name: str
    allies: list[str] = []
    blocks: list[str] = []
    hostiles: list[str] = []
    created_at: datetime | None = None

    @classmethod
    def from_soul(cls, soul: Soul) -> "SoulView":
        return cls(**soul.to_public())
