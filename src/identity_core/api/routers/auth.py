"""
identity_core.api.routers.auth

Authentication endpoints.

Responsibilities:
- Log in (authenticate, upgrade legacy digests, record login metadata, bind session).
- Log out, report the current identity, change password, issue confirmation keys.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from identity_core.api.deps import policy_dep, revalidator_dep, settings_dep, user_store
from identity_core.auth.credentials import (
    authenticate,
    generate_confirmation_key,
    needs_rehash,
    set_password,
)
from identity_core.auth.deps import SESSION_KEY, require_identity
from identity_core.auth.password_policy import check_password_policy
from identity_core.db.repositories.users import UserRepo
from identity_core.identity.models import Identity
from identity_core.identity.policy import AccessPolicy
from identity_core.identity.record import PublicIdentity, public_view
from identity_core.observability.logging import get_logger
from identity_core.session.revalidator import SessionRevalidator
from identity_core.settings import Settings

router = APIRouter(prefix="/v1/auth", tags=["auth"])

log = get_logger(__name__)


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=1024)


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=1024)
    password: str = Field(max_length=1024)
    confirm_password: str | None = Field(default=None, max_length=1024)


class ConfirmationResponse(BaseModel):
    expires_at: datetime
    tries: int


@router.post("/login", response_model=PublicIdentity)
async def login(
    body: LoginRequest,
    request: Request,
    store: UserRepo = Depends(user_store),
    revalidator: SessionRevalidator = Depends(revalidator_dep),
    settings: Settings = Depends(settings_dep),
    policy: AccessPolicy = Depends(policy_dep),
) -> PublicIdentity:
    identity = await store.find_by_email(body.email)
    # Locked accounts get the same answer as a wrong password, before any hash check.
    if identity is None or identity.locked_at is not None:
        log.info("login_rejected", locked=identity is not None)
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not authenticate(identity, body.password):
        log.info("login_rejected", locked=False)
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    now = datetime.now(tz=UTC)
    fields: dict[str, object] = {
        "last_login_at": now,
        "last_login_ip": request.client.host if request.client else None,
        # A new login restarts the activity clock for the session it binds.
        "last_request_at": now,
    }
    params = settings.hash_params()
    if needs_rehash(identity, params):
        set_password(identity, body.password, params)
        fields.update(salt=identity.salt, hashed_password=identity.hashed_password)
        log.info("password_rehashed", identity_id=str(identity.id))
    await store.update_by_id(identity.id, fields)

    identity.last_login_at = now
    identity.last_request_at = now
    identity.last_login_ip = fields["last_login_ip"]  # type: ignore[assignment]
    request.session[SESSION_KEY] = revalidator.serialize(identity)
    log.info("login_succeeded", identity_id=str(identity.id))
    return public_view(identity, policy)


@router.post("/logout", status_code=204)
async def logout(request: Request) -> None:
    request.session.clear()


@router.get("/me", response_model=PublicIdentity)
async def me(
    identity: Identity = Depends(require_identity),
    policy: AccessPolicy = Depends(policy_dep),
) -> PublicIdentity:
    return public_view(identity, policy)


@router.post("/password", status_code=204)
async def change_password(
    body: PasswordChangeRequest,
    identity: Identity = Depends(require_identity),
    store: UserRepo = Depends(user_store),
    settings: Settings = Depends(settings_dep),
) -> None:
    if identity.locked_at is not None:
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Account locked")
    if not authenticate(identity, body.current_password):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    violation = check_password_policy(body.password, body.confirm_password)
    if violation is not None:
        raise HTTPException(
            status_code=422,
            detail={"reason": violation.reason.value},
        )
    set_password(identity, body.password, settings.hash_params())
    await store.update_by_id(
        identity.id,
        {"salt": identity.salt, "hashed_password": identity.hashed_password},
    )
    log.info("password_changed", identity_id=str(identity.id))


@router.post("/confirmation", response_model=ConfirmationResponse)
async def issue_confirmation(
    identity: Identity = Depends(require_identity),
    store: UserRepo = Depends(user_store),
    settings: Settings = Depends(settings_dep),
) -> ConfirmationResponse:
    issued = generate_confirmation_key(identity, ttl=settings.confirmation_ttl())
    await store.update_by_id(
        identity.id,
        {
            "confirmation_key": issued.key,
            "confirmation_expires": issued.expires_at,
            "confirmation_tries": issued.tries,
        },
    )
    log.info("confirmation_key_issued", identity_id=str(identity.id), tries=issued.tries)
    return ConfirmationResponse(expires_at=issued.expires_at, tries=issued.tries)


# --- Module Notes -----------------------------------------------------------
# The confirmation key itself is never returned over HTTP; delivering it (mail, etc.)
# belongs to whichever flow consumes `users.confirmation_key`.
