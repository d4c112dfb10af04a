"""
identity_core.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., session signing secret).
- Build the explicit `AccessPolicy` handed to identity/session operations.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from identity_core.auth.credentials import HashParams
from identity_core.identity.policy import AccessPolicy


class Settings(BaseSettings):
    """
    Process-wide configuration.

    Superuser membership and the session timeout are read from here exactly once per
    request (via `access_policy()`), never from module globals inside the core.
    """

    model_config = SettingsConfigDict(env_prefix="IDENTITY_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "identity-core"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Sessions
    session_secret: str = Field(default="dev-session-secret-change-me", repr=False)
    session_cookie: str = "identity_session"
    session_timeout_millis: int = Field(default=30 * 60 * 1000, gt=0)

    # Authorization; JSON list in the environment, e.g. IDENTITY_SUPERUSER_EMAILS='["a@b.io"]'
    superuser_emails: set[str] = Field(default_factory=set)

    confirmation_ttl_seconds: int = Field(default=1800, gt=0)

    # Argon2id cost parameters
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 64 * 1024
    argon2_parallelism: int = 4

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./identity.db"

    def access_policy(self) -> AccessPolicy:
        return AccessPolicy(
            session_timeout=timedelta(milliseconds=self.session_timeout_millis),
            superuser_emails=frozenset(self.superuser_emails),
        )

    def hash_params(self) -> HashParams:
        return HashParams(
            time_cost=self.argon2_time_cost,
            memory_cost=self.argon2_memory_cost,
            parallelism=self.argon2_parallelism,
        )

    def confirmation_ttl(self) -> timedelta:
        return timedelta(seconds=self.confirmation_ttl_seconds)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(...)` directly instead of going through the cache.
