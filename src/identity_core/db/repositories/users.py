"""
identity_core.db.repositories.users

SQL implementation of the `UserStore` contract.

Responsibilities:
- Convert between `UserRow` and `Identity` values.
- Commit each write so callers observe its outcome before continuing.
- Translate SQLAlchemy failures into `StoreError`.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_core.db.models import UserRow
from identity_core.identity.models import Identity, normalize_email
from identity_core.identity.store import UPDATABLE_FIELDS, EmailTakenError, StoreError

_DATETIME_FIELDS = (
    "last_login_at",
    "last_request_at",
    "locked_at",
    "confirmation_expires",
    "created_at",
    "updated_at",
)


def _aware(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back; values are always written as UTC.
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _to_identity(row: UserRow) -> Identity:
    identity = Identity(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        salt=row.salt,
        hashed_password=row.hashed_password,
        role=row.role,
        lang=row.lang,
        last_login_ip=row.last_login_ip,
        locked_by=row.locked_by,
        confirmation_key=row.confirmation_key,
        confirmation_tries=row.confirmation_tries,
    )
    for name in _DATETIME_FIELDS:
        setattr(identity, name, _aware(getattr(row, name)))
    return identity


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, identity_id: uuid.UUID) -> Identity | None:
        try:
            row = await self._session.get(UserRow, identity_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise StoreError(f"user lookup failed: {e}") from e
        return _to_identity(row) if row is not None else None

    async def find_by_email(self, email: str) -> Identity | None:
        try:
            normalized = normalize_email(email)
        except ValueError:
            return None
        stmt = select(UserRow).where(UserRow.email == normalized)
        try:
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(f"user lookup failed: {e}") from e
        return _to_identity(row) if row is not None else None

    async def create(self, identity: Identity) -> Identity:
        if not identity.has_credentials:
            raise ValueError("identity must have a password set before it is stored")
        row = UserRow(
            id=identity.id,
            email=identity.email,
            first_name=identity.first_name,
            last_name=identity.last_name,
            salt=identity.salt,
            hashed_password=identity.hashed_password,
            role=identity.role,
            lang=identity.lang,
            confirmation_tries=identity.confirmation_tries,
        )
        self._session.add(row)
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise EmailTakenError(identity.email) from e
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StoreError(f"user create failed: {e}") from e
        identity.created_at = _aware(row.created_at)
        identity.updated_at = _aware(row.updated_at)
        return identity

    async def update_by_id(self, identity_id: uuid.UUID, fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"fields not updatable: {sorted(unknown)}")
        if ("salt" in fields) != ("hashed_password" in fields):
            raise ValueError("salt and hashed_password must be updated together")
        if not fields:
            return
        stmt = update(UserRow).where(UserRow.id == identity_id).values(**fields)
        try:
            await self._session.execute(stmt)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            raise StoreError(f"user update failed: {e}") from e


# --- Module Notes -----------------------------------------------------------
# Updating a missing id is a no-op, matching update-by-id semantics of the store contract.
