"""
identity_core.identity.policy

Explicit authorization/session configuration passed into the core.

Responsibilities:
- Carry the session timeout and the superuser allow-list as an immutable value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    session_timeout: timedelta
    superuser_emails: frozenset[str] = field(default_factory=frozenset)


# --- Module Notes -----------------------------------------------------------
# Built from `Settings.access_policy()`; tests build it directly.
