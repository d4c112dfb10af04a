"""
identity_core.identity.record

Derived identity properties and the public projection.

Responsibilities:
- Compute display name, superuser and admin tiers on demand (never stored).
- Project an identity into the allow-listed shape exposed to untrusted consumers.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from identity_core.identity.models import ADMIN_ROLE_THRESHOLD, Domain, Identity
from identity_core.identity.policy import AccessPolicy


def full_name(identity: Identity) -> str:
    if identity.first_name and identity.last_name:
        return f"{identity.first_name} {identity.last_name}"
    if identity.first_name:
        return identity.first_name
    if identity.last_name:
        return identity.last_name
    return identity.email


def is_superuser(identity: Identity, policy: AccessPolicy) -> bool:
    # Exact match against the stored (already lowercased) email.
    if not policy.superuser_emails:
        return False
    return identity.email in policy.superuser_emails


def is_admin(identity: Identity, policy: AccessPolicy, context: Domain | None = None) -> bool:
    """
    Superusers are always admins. With a domain context, only its owner is;
    otherwise the role threshold decides.
    """

    if is_superuser(identity, policy):
        return True
    if context is not None:
        return context.owner_id == identity.id
    return identity.role <= ADMIN_ROLE_THRESHOLD


def admin(identity: Identity, policy: AccessPolicy) -> bool:
    # No context here: the domain-ownership branch of `is_admin` is unreachable.
    return is_superuser(identity, policy) or identity.role <= ADMIN_ROLE_THRESHOLD


class PublicIdentity(BaseModel):
    """Allow-listed attributes safe to hand to any untrusted consumer."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    first_name: str | None
    last_name: str | None
    full_name: str
    email: str
    last_login_at: datetime | None
    last_request_at: datetime | None
    superuser: bool
    admin: bool


def public_view(identity: Identity, policy: AccessPolicy) -> PublicIdentity:
    return PublicIdentity(
        first_name=identity.first_name,
        last_name=identity.last_name,
        full_name=full_name(identity),
        email=identity.email,
        last_login_at=identity.last_login_at,
        last_request_at=identity.last_request_at,
        superuser=is_superuser(identity, policy),
        admin=admin(identity, policy),
    )


# --- Module Notes -----------------------------------------------------------
# Routers declare `PublicIdentity` as their response model.
