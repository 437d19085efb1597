"""Credential Manager — salted Argon2id hashing and constant-time verification.

Invariants:
    - A fresh random salt is drawn for every hash_password call
    - Plaintext passwords are never stored, logged, or returned
    - verify_password compares digests with hmac.compare_digest (constant time)
    - A stored credential missing its salt or hash raises CorruptCredentialError,
      it is never reported as a plain mismatch
    - The same HashParams must be used to hash and to verify: the stored
      {salt, hash} pair does not record its cost parameters

Design Decisions:
    - argon2.low_level.hash_secret_raw over PasswordHasher: yields the raw key,
      so salt and hash stay two hex columns instead of one encoded string
    - Cost parameters injected (HashParams), defaults match OWASP Argon2id guidance
    - Pure and synchronous: the shell offloads calls with asyncio.to_thread
"""

import hmac
import secrets
from dataclasses import dataclass
from typing import Any, Mapping

from argon2.low_level import Type, hash_secret_raw

from souls.core.errors import CorruptCredentialError


SALT_BYTES: int = 16
KEY_BYTES: int = 32


@dataclass(frozen=True)
class HashParams:
    """Argon2id cost parameters. memory_cost is in KiB."""
    time_cost: int = 3
    memory_cost: int = 65536
    parallelism: int = 4


DEFAULT_PARAMS = HashParams()


@dataclass(frozen=True)
class Credential:
    """Salted-hash pair. repr hides both halves."""
    salt: str
    hash: str

    def __repr__(self) -> str:
        return "Credential(salt=<hidden>, hash=<hidden>)"

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> "Credential":
        """Build from a persisted {salt, hash} mapping, rejecting incomplete ones."""
        if not doc:
            raise CorruptCredentialError("credential missing")
        salt, digest = doc.get("salt"), doc.get("hash")
        if not salt or not digest:
            raise CorruptCredentialError("salt or hash missing")
        return cls(salt=salt, hash=digest)

    def to_document(self) -> dict:
        return {"salt": self.salt, "hash": self.hash}


def _derive(plaintext: str, salt: bytes, params: HashParams) -> bytes:
    return hash_secret_raw(
        plaintext.encode("utf-8"), salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=KEY_BYTES,
        type=Type.ID,
    )


def hash_password(plaintext: str, params: HashParams = DEFAULT_PARAMS) -> Credential:
    """Hash a password with a fresh random salt."""
    salt = secrets.token_bytes(SALT_BYTES)
    return Credential(
        salt=salt.hex(), hash=_derive(plaintext, salt, params).hex(),
    )


def verify_password(
    candidate: str, stored: Credential, params: HashParams = DEFAULT_PARAMS,
) -> bool:
    """Recompute candidate's hash with the stored salt and compare in constant time."""
    if not stored.salt or not stored.hash:
        raise CorruptCredentialError("salt or hash missing")
    try:
        salt = bytes.fromhex(stored.salt)
        expected = bytes.fromhex(stored.hash)
    except ValueError as exc:
        raise CorruptCredentialError("salt or hash is not hex encoded") from exc
    if len(salt) != SALT_BYTES:
        raise CorruptCredentialError("salt has the wrong length")
    return hmac.compare_digest(_derive(candidate, salt, params), expected)
