"""
IdeaFlow: Application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `services/`, `store/`, `api/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ideaflow.api.v1.api import api_router
from ideaflow.api.v1.endpoints.auth import limiter
from ideaflow.core.config import settings
from ideaflow.core.exceptions import register_exception_handlers
from ideaflow.db.base import Base
from ideaflow.db.session import async_session_factory, engine
from ideaflow.services.directory import UserDirectory
from ideaflow.store.persistent import SqlStore

# Ensure all models are imported so metadata.create_all can see them
from ideaflow.models.stored_collection import StoredCollection  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    # Seed default admin user on first run
    async with async_session_factory() as session:
        directory = UserDirectory(SqlStore(session))
        if await directory.get_by_email(settings.FIRST_ADMIN_EMAIL) is None:
            await directory.create(
                username="System Administrator",
                email=settings.FIRST_ADMIN_EMAIL,
                password=settings.FIRST_ADMIN_PASSWORD,
                is_admin=True,
            )
            logger.info(
                "Default admin created: %s (password: <redacted>)",
                settings.FIRST_ADMIN_EMAIL,
            )

    logger.info("🚀 IdeaFlow v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Personal idea capture, AI enhancement and idea bank",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting (login / register / refresh)
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()
