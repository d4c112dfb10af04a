"""
tests.conftest

Shared fixtures.

Responsibilities:
- In-memory `UserStore` fake with failure injection.
- Default access policy and cheap hashing parameters.
"""

from __future__ import annotations

import asyncio
import dataclasses
import uuid
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

import pytest

from identity_core.auth.credentials import HashParams
from identity_core.identity.models import Identity
from identity_core.identity.policy import AccessPolicy
from identity_core.identity.store import EmailTakenError, StoreError

FAST_HASH = HashParams(time_cost=1, memory_cost=1024, parallelism=1)


class FakeUserStore:
    def __init__(self) -> None:
        self.rows: dict[uuid.UUID, Identity] = {}
        self.lookups: list[uuid.UUID] = []
        self.updates: list[tuple[uuid.UUID, dict[str, Any]]] = []
        self.fail_find = False
        self.fail_update = False
        self.update_gate: asyncio.Event | None = None

    def add(self, identity: Identity) -> Identity:
        self.rows[identity.id] = dataclasses.replace(identity, password=None)
        return identity

    async def find_by_id(self, identity_id: uuid.UUID) -> Identity | None:
        self.lookups.append(identity_id)
        if self.fail_find:
            raise StoreError("lookup failed")
        row = self.rows.get(identity_id)
        return dataclasses.replace(row) if row is not None else None

    async def find_by_email(self, email: str) -> Identity | None:
        for row in self.rows.values():
            if row.email == email.lower():
                return dataclasses.replace(row)
        return None

    async def create(self, identity: Identity) -> Identity:
        if any(row.email == identity.email for row in self.rows.values()):
            raise EmailTakenError(identity.email)
        return self.add(identity)

    async def update_by_id(self, identity_id: uuid.UUID, fields: Mapping[str, Any]) -> None:
        if self.update_gate is not None:
            await self.update_gate.wait()
        if self.fail_update:
            raise StoreError("update failed")
        self.updates.append((identity_id, dict(fields)))
        row = self.rows.get(identity_id)
        if row is not None:
            for name, value in fields.items():
                setattr(row, name, value)


@pytest.fixture
def store() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture
def policy() -> AccessPolicy:
    return AccessPolicy(session_timeout=timedelta(seconds=5))
