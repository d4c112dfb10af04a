"""
identity_core.db.init_db

DB initialization helpers (dev/test convenience).

Responsibilities:
- Create the users table for local development and tests.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from identity_core.db import models  # noqa: F401  # register tables on Base.metadata
from identity_core.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
