"""
identity_core.db.models

Persistence schema for identities.

Responsibilities:
- Define the `users` table backing `Identity` values.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from identity_core.db.base import Base
from identity_core.identity.models import DEFAULT_ROLE


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)

    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)

    salt: Mapped[str] = mapped_column(String(128), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(256), nullable=False)

    role: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_ROLE)
    lang: Mapped[str] = mapped_column(String(16), nullable=False, default="en")

    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    last_request_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    locked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    locked_by: Mapped[uuid.UUID | None] = mapped_column(SAUuid(as_uuid=True), nullable=True)

    confirmation_key: Mapped[str | None] = mapped_column(String(64), nullable=True)
    confirmation_expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    confirmation_tries: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        CheckConstraint("role > 0", name="ck_users_role_positive"),
        CheckConstraint("email = lower(email)", name="ck_users_email_lowercase"),
    )


# --- Module Notes -----------------------------------------------------------
# `Identity.password` (plaintext) has no column.
