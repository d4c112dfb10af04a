"""
identity_core.identity.store

User store contract consumed by the core.

Responsibilities:
- Define the async `UserStore` protocol (find/create/update-by-id).
- Define `StoreError`, the single infrastructure failure type.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, Protocol

from identity_core.identity.models import Identity


class StoreError(Exception):
    """Transport/query failure in the user store. Always propagated, never swallowed."""


class EmailTakenError(Exception):
    """Another identity already owns this (normalized) email."""


class UserStore(Protocol):
    async def find_by_id(self, identity_id: uuid.UUID) -> Identity | None: ...

    async def find_by_email(self, email: str) -> Identity | None: ...

    async def create(self, identity: Identity) -> Identity: ...

    async def update_by_id(self, identity_id: uuid.UUID, fields: Mapping[str, Any]) -> None: ...


# Fields a store update may touch. Never includes the plaintext `password`.
UPDATABLE_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "salt",
        "hashed_password",
        "role",
        "lang",
        "last_login_at",
        "last_login_ip",
        "last_request_at",
        "locked_at",
        "locked_by",
        "confirmation_key",
        "confirmation_expires",
        "confirmation_tries",
    }
)


# --- Module Notes -----------------------------------------------------------
# `identity_core.db.repositories.users.UserRepo` is the SQL implementation; tests use
# an in-memory fake with the same shape.
