"""
identity_core.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Resolve the session cookie into a revalidated `Identity` (or anonymous).
- Enforce authentication and the admin tier via reusable dependencies.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from identity_core.api.deps import policy_dep, revalidator_dep
from identity_core.identity.models import Identity
from identity_core.identity.policy import AccessPolicy
from identity_core.identity.record import admin
from identity_core.session.revalidator import SessionRevalidator

SESSION_KEY = "identity_id"


async def current_identity(
    request: Request,
    revalidator: SessionRevalidator = Depends(revalidator_dep),
) -> Identity | None:
    session_id = request.session.get(SESSION_KEY)
    if session_id is None:
        return None
    # StoreError propagates; the app maps it to 503.
    identity = await revalidator.deserialize(session_id)
    if identity is None:
        request.session.pop(SESSION_KEY, None)
    return identity


def require_identity(identity: Identity | None = Depends(current_identity)) -> Identity:
    if identity is None:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return identity


def require_admin(
    identity: Identity = Depends(require_identity),
    policy: AccessPolicy = Depends(policy_dep),
) -> Identity:
    if not admin(identity, policy):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Admin required")
    return identity


# --- Module Notes -----------------------------------------------------------
# Domain-scoped admin checks call `identity.record.is_admin(identity, policy, domain)`
# directly; this module only enforces the context-free tier.
