from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_404_NOT_FOUND

from identity_core.api.deps import policy_dep, user_store
from identity_core.auth.deps import require_admin
from identity_core.db.repositories.users import UserRepo
from identity_core.identity.policy import AccessPolicy
from identity_core.identity.record import PublicIdentity, public_view

router = APIRouter(prefix="/v1/users", tags=["users"])


@router.get(
    "/{user_id}",
    response_model=PublicIdentity,
    dependencies=[Depends(require_admin)],
)
async def get_user(
    user_id: uuid.UUID,
    store: UserRepo = Depends(user_store),
    policy: AccessPolicy = Depends(policy_dep),
) -> PublicIdentity:
    identity = await store.find_by_id(user_id)
    if identity is None:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="User not found")
    return public_view(identity, policy)
