from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND, HTTP_409_CONFLICT

from identity_core.api.deps import policy_dep, settings_dep, user_store
from identity_core.auth.credentials import set_password
from identity_core.auth.password_policy import check_password_policy
from identity_core.db.repositories.users import UserRepo
from identity_core.identity.models import DEFAULT_ROLE, Identity
from identity_core.identity.policy import AccessPolicy
from identity_core.identity.record import PublicIdentity, public_view
from identity_core.identity.store import EmailTakenError
from identity_core.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevAccountRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(max_length=1024)
    confirm_password: str | None = Field(default=None, max_length=1024)
    first_name: str | None = Field(default=None, max_length=128)
    last_name: str | None = Field(default=None, max_length=128)
    role: int = Field(default=DEFAULT_ROLE, ge=1)


@router.post("/users", response_model=PublicIdentity, status_code=201)
async def create_dev_account(
    body: DevAccountRequest,
    store: UserRepo = Depends(user_store),
    settings: Settings = Depends(settings_dep),
    policy: AccessPolicy = Depends(policy_dep),
) -> PublicIdentity:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    violation = check_password_policy(body.password, body.confirm_password)
    if violation is not None:
        raise HTTPException(status_code=422, detail={"reason": violation.reason.value})

    try:
        identity = Identity(
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
            role=body.role,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    set_password(identity, body.password, settings.hash_params())
    try:
        await store.create(identity)
    except EmailTakenError as e:
        raise HTTPException(status_code=HTTP_409_CONFLICT, detail="Email already registered") from e
    return public_view(identity, policy)
