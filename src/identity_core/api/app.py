"""
identity_core.api.app

FastAPI app factory for the identity service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Map store failures to a 503 response.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from identity_core import __version__
from identity_core.api.routers.auth import router as auth_router
from identity_core.api.routers.dev_accounts import router as dev_accounts_router
from identity_core.api.routers.health import router as health_router
from identity_core.api.routers.users import router as users_router
from identity_core.db.init_db import init_db
from identity_core.db.session import create_engine, create_sessionmaker
from identity_core.identity.store import StoreError
from identity_core.observability.logging import configure_logging, get_logger
from identity_core.observability.middleware import RequestContextMiddleware
from identity_core.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod schemas are managed outside the service.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Identity Core",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        same_site="lax",
        https_only=settings.env == "prod",
    )
    app.add_middleware(RequestContextMiddleware)

    @app.exception_handler(StoreError)
    async def _store_error(_: Request, exc: StoreError) -> JSONResponse:
        log.error("store_unavailable", error=str(exc))
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "User store unavailable"},
        )

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(dev_accounts_router)

    return app


# --- Module Notes -----------------------------------------------------------
# SessionMiddleware only carries the signed cookie; what it holds (the identity id)
# and how it is revalidated lives in `auth.deps` and `session.revalidator`.
