"""
identity_core.session.revalidator

Per-request session revalidation.

Responsibilities:
- Serialize an identity into the session as its id only.
- Deserialize a session id into a fresh identity: lookup, staleness check, activity refresh.
- Degrade missing or expired sessions to anonymous; propagate store failures unchanged.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from identity_core.identity.models import Identity
from identity_core.identity.policy import AccessPolicy
from identity_core.identity.store import StoreError, UserStore
from identity_core.observability.logging import get_logger

log = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)


class SessionRevalidator:
    """
    Session middleware hooks.

    Holds no identity state between calls: every `deserialize` reads the store.
    """

    def __init__(
        self,
        *,
        store: UserStore,
        policy: AccessPolicy,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._policy = policy
        self._clock = clock

    def serialize(self, identity: Identity) -> str:
        return str(identity.id)

    def is_stale(self, identity: Identity, now: datetime) -> bool:
        # No recorded request yet means first request since login.
        if identity.last_request_at is None:
            return False
        return now - _as_utc(identity.last_request_at) > self._policy.session_timeout

    async def deserialize(self, session_id: str | uuid.UUID | None) -> Identity | None:
        identity_id = _parse_id(session_id)
        if identity_id is None:
            return None

        try:
            identity = await self._store.find_by_id(identity_id)
        except StoreError:
            log.error("session_lookup_failed", identity_id=str(identity_id))
            raise

        if identity is None:
            log.debug("session_identity_missing", identity_id=str(identity_id))
            return None

        now = self._clock()
        if self.is_stale(identity, now):
            log.info("session_expired", identity_id=str(identity_id))
            return None

        refresh = asyncio.create_task(
            self._store.update_by_id(identity_id, {"last_request_at": now})
        )
        # Reports the outcome even when the awaiting request was cancelled.
        refresh.add_done_callback(_report_refresh_failure(identity_id))
        # Shielded: a client disconnect must not abort the in-flight write.
        await asyncio.shield(refresh)

        identity.last_request_at = now
        return identity


def _report_refresh_failure(identity_id: uuid.UUID) -> Callable[[asyncio.Task[None]], None]:
    def callback(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("session_refresh_failed", identity_id=str(identity_id), error=str(exc))

    return callback


def _parse_id(session_id: str | uuid.UUID | None) -> uuid.UUID | None:
    if session_id is None or isinstance(session_id, uuid.UUID):
        return session_id
    try:
        return uuid.UUID(str(session_id))
    except ValueError:
        return None


# --- Module Notes -----------------------------------------------------------
# Lookup-then-refresh is not atomic; concurrent requests for the same session race on
# `last_request_at` and the last write wins. That field is advisory, so no locking.
