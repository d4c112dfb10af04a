"""
identity_core.identity.models

Identity domain models.

Responsibilities:
- Define the persisted principal (`Identity`) as an explicit typed struct.
- Enforce construction-time invariants (lowercase email, positive role, salt/hash pair).
- Define the ownership context (`Domain`) used by admin evaluation.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_ROLE = 100
ADMIN_ROLE_THRESHOLD = 5


def normalize_email(value: str) -> str:
    email = (value or "").strip().lower()
    if "@" not in email:
        raise ValueError("invalid email address")
    return email


@dataclass(slots=True)
class Identity:
    """
    One authenticated principal.

    `password` only ever holds the plaintext on the instance that just called
    `set_password`; stores never read it.
    """

    email: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    first_name: str | None = None
    last_name: str | None = None
    salt: str | None = None
    hashed_password: str | None = None
    role: int = DEFAULT_ROLE
    lang: str = "en"

    last_login_at: datetime | None = None
    last_login_ip: str | None = None
    last_request_at: datetime | None = None

    locked_at: datetime | None = None
    locked_by: uuid.UUID | None = None

    confirmation_key: str | None = field(default=None, repr=False)
    confirmation_expires: datetime | None = None
    confirmation_tries: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None

    password: str | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.email = normalize_email(self.email)
        if isinstance(self.role, bool) or not isinstance(self.role, int) or self.role <= 0:
            raise ValueError("role must be a positive integer")
        if (self.salt is None) != (self.hashed_password is None):
            raise ValueError("salt and hashed_password must be set together")

    @property
    def has_credentials(self) -> bool:
        return self.salt is not None and self.hashed_password is not None


@dataclass(frozen=True, slots=True)
class Domain:
    """Ownership context for `is_admin`; only the owner relation is modeled."""

    id: uuid.UUID
    owner_id: uuid.UUID


# --- Module Notes -----------------------------------------------------------
# Role values are "lower is more privileged"; ADMIN_ROLE_THRESHOLD is inclusive.
