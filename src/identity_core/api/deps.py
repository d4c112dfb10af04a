"""
identity_core.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and the user store.
- Build a per-request `SessionRevalidator` (no state shared between requests).
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_core.db.repositories.users import UserRepo
from identity_core.identity.policy import AccessPolicy
from identity_core.session.revalidator import SessionRevalidator
from identity_core.settings import Settings


def settings_dep(request: Request) -> Settings:
    # Set by `create_app`, so tests can inject their own Settings instance.
    return request.app.state.settings  # type: ignore[attr-defined]


def policy_dep(settings: Settings = Depends(settings_dep)) -> AccessPolicy:
    return settings.access_policy()


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


def user_store(session: AsyncSession = Depends(db_session)) -> UserRepo:
    return UserRepo(session)


def revalidator_dep(
    store: UserRepo = Depends(user_store),
    policy: AccessPolicy = Depends(policy_dep),
) -> SessionRevalidator:
    return SessionRevalidator(store=store, policy=policy)
