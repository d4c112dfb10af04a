"""
identity_core.auth.credentials

Password credential storage and verification.

Responsibilities:
- Generate per-password salts.
- Derive deterministic salted digests (argon2id) and encode them with their cost parameters.
- Set and verify passwords on an `Identity`; keep verifying legacy HMAC-SHA256 digests.
- Issue confirmation keys with an expiry and a tries counter.

Note:
- Digests are stored as `argon2id$m=<kib>,t=<iters>,p=<lanes>$<hex>`. Values without
  the prefix are legacy HMAC-SHA256(key=salt) hex digests.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from argon2.low_level import Type, hash_secret_raw

from identity_core.identity.models import Identity

_PREFIX = "argon2id$"
_HASH_LEN = 32
_SALT_BYTES = 16
_CONFIRMATION_KEY_BYTES = 12

CONFIRMATION_TTL = timedelta(seconds=1800)


@dataclass(frozen=True, slots=True)
class HashParams:
    time_cost: int = 3
    memory_cost: int = 64 * 1024
    parallelism: int = 4

    def encode(self) -> str:
        return f"m={self.memory_cost},t={self.time_cost},p={self.parallelism}"

    @classmethod
    def decode(cls, raw: str) -> HashParams:
        parts = dict(item.split("=", 1) for item in raw.split(","))
        return cls(
            time_cost=int(parts["t"]),
            memory_cost=int(parts["m"]),
            parallelism=int(parts["p"]),
        )


DEFAULT_PARAMS = HashParams()


def generate_salt() -> str:
    return secrets.token_hex(_SALT_BYTES)


def hash_password(plaintext: str, salt: str, params: HashParams = DEFAULT_PARAMS) -> str:
    digest = hash_secret_raw(
        secret=plaintext.encode("utf-8"),
        salt=salt.encode("utf-8"),
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=_HASH_LEN,
        type=Type.ID,
    )
    return f"{_PREFIX}{params.encode()}${digest.hex()}"


def _legacy_hash(plaintext: str, salt: str) -> str:
    return hmac.new(salt.encode("utf-8"), plaintext.encode("utf-8"), hashlib.sha256).hexdigest()


def is_legacy_hash(hashed: str) -> bool:
    return not hashed.startswith(_PREFIX)


def needs_rehash(identity: Identity, params: HashParams = DEFAULT_PARAMS) -> bool:
    stored = identity.hashed_password or ""
    if is_legacy_hash(stored):
        return True
    encoded_params = stored[len(_PREFIX) :].split("$", 1)[0]
    return encoded_params != params.encode()


def set_password(identity: Identity, plaintext: str, params: HashParams = DEFAULT_PARAMS) -> None:
    salt = generate_salt()
    hashed = hash_password(plaintext, salt, params)
    # Assign the pair together so the salt never outlives its hash.
    identity.salt, identity.hashed_password = salt, hashed
    identity.password = plaintext


def authenticate(identity: Identity, plaintext: str) -> bool:
    if not identity.has_credentials:
        return False
    stored = identity.hashed_password or ""
    salt = identity.salt or ""
    if is_legacy_hash(stored):
        candidate = _legacy_hash(plaintext, salt)
    else:
        encoded_params = stored[len(_PREFIX) :].split("$", 1)[0]
        try:
            params = HashParams.decode(encoded_params)
        except (KeyError, ValueError):
            return False
        candidate = hash_password(plaintext, salt, params)
    return secrets.compare_digest(candidate, stored)


@dataclass(frozen=True, slots=True)
class ConfirmationKey:
    key: str
    expires_at: datetime
    tries: int


def generate_confirmation_key(
    identity: Identity,
    *,
    ttl: timedelta = CONFIRMATION_TTL,
    now: datetime | None = None,
) -> ConfirmationKey:
    issued_at = now or datetime.now(tz=UTC)
    identity.confirmation_key = secrets.token_urlsafe(_CONFIRMATION_KEY_BYTES)
    identity.confirmation_expires = issued_at + ttl
    identity.confirmation_tries = (identity.confirmation_tries or 0) + 1
    return ConfirmationKey(
        key=identity.confirmation_key,
        expires_at=identity.confirmation_expires,
        tries=identity.confirmation_tries,
    )


# --- Module Notes -----------------------------------------------------------
# Legacy digests are upgraded on the next successful login (see api.routers.auth).
