from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from identity_core.auth.credentials import authenticate, set_password
from identity_core.db.init_db import init_db
from identity_core.db.repositories.users import UserRepo
from identity_core.db.session import create_engine, create_sessionmaker
from identity_core.identity.models import Identity
from identity_core.identity.store import EmailTakenError, StoreError
from identity_core.settings import Settings
from tests.conftest import FAST_HASH


def _settings(tmp_path) -> Settings:
    return Settings(env="test", database_url=f"sqlite+aiosqlite:///{tmp_path}/users.db")


@pytest_asyncio.fixture
async def sessions(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_engine(_settings(tmp_path))
    await init_db(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


def _new_identity(email: str = "Henry@Example.com") -> Identity:
    identity = Identity(email=email, first_name="Henry", last_name="King")
    set_password(identity, "Secret12", FAST_HASH)
    return identity


@pytest.mark.asyncio
async def test_create_and_find(sessions) -> None:
    async with sessions() as session:
        created = await UserRepo(session).create(_new_identity())

    async with sessions() as session:
        repo = UserRepo(session)
        by_id = await repo.find_by_id(created.id)
        by_email = await repo.find_by_email("HENRY@example.com")

    assert by_id is not None and by_email is not None
    assert by_id.id == by_email.id == created.id
    assert by_id.email == "henry@example.com"
    assert by_id.password is None
    assert authenticate(by_id, "Secret12") is True
    assert by_id.created_at is not None and by_id.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_find_missing_returns_none(sessions) -> None:
    async with sessions() as session:
        repo = UserRepo(session)
        assert await repo.find_by_id(uuid.uuid4()) is None
        assert await repo.find_by_email("ghost@example.com") is None
        assert await repo.find_by_email("no-at-sign") is None


@pytest.mark.asyncio
async def test_create_requires_password(sessions) -> None:
    async with sessions() as session:
        with pytest.raises(ValueError):
            await UserRepo(session).create(Identity(email="bare@example.com"))


@pytest.mark.asyncio
async def test_duplicate_email_is_rejected(sessions) -> None:
    async with sessions() as session:
        await UserRepo(session).create(_new_identity())
    async with sessions() as session:
        with pytest.raises(EmailTakenError):
            await UserRepo(session).create(_new_identity("henry@EXAMPLE.com"))


@pytest.mark.asyncio
async def test_update_by_id_persists_timestamps_as_utc(sessions) -> None:
    async with sessions() as session:
        created = await UserRepo(session).create(_new_identity())

    stamp = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)
    async with sessions() as session:
        await UserRepo(session).update_by_id(
            created.id, {"last_request_at": stamp, "last_login_ip": "10.1.2.3"}
        )

    async with sessions() as session:
        found = await UserRepo(session).find_by_id(created.id)
    assert found is not None
    assert found.last_request_at == stamp
    assert found.last_login_ip == "10.1.2.3"


@pytest.mark.asyncio
async def test_update_is_visible_within_the_same_session(sessions) -> None:
    async with sessions() as session:
        repo = UserRepo(session)
        created = await repo.create(_new_identity())
        stamp = datetime.now(tz=UTC) - timedelta(minutes=1)
        await repo.update_by_id(created.id, {"last_request_at": stamp})
        found = await repo.find_by_id(created.id)
    assert found is not None
    assert found.last_request_at == stamp


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields_and_split_credentials(sessions) -> None:
    async with sessions() as session:
        repo = UserRepo(session)
        with pytest.raises(ValueError):
            await repo.update_by_id(uuid.uuid4(), {"email": "x@y.z"})
        with pytest.raises(ValueError):
            await repo.update_by_id(uuid.uuid4(), {"password": "Plain1"})
        with pytest.raises(ValueError):
            await repo.update_by_id(uuid.uuid4(), {"salt": "only-salt"})


@pytest.mark.asyncio
async def test_database_failures_become_store_errors(tmp_path) -> None:
    # No init_db: the users table does not exist.
    engine = create_engine(_settings(tmp_path))
    try:
        async with create_sessionmaker(engine)() as session:
            repo = UserRepo(session)
            with pytest.raises(StoreError):
                await repo.find_by_id(uuid.uuid4())
            with pytest.raises(StoreError):
                await repo.update_by_id(uuid.uuid4(), {"last_request_at": datetime.now(tz=UTC)})
    finally:
        await engine.dispose()
