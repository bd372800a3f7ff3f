"""
Centralised application settings loaded from environment / .env file.

Uses pydantic-settings so every value can be overridden via env vars
or the .env file at the project root.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "IdeaFlow"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # ── Storage (async SQLAlchemy; aiosqlite locally, asyncpg in prod) ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./ideaflow.db"

    # ── JWT ──────────────────────────────────────────────────────────
    SECRET_KEY: str = "CHANGE-ME-TO-A-RANDOM-64-CHAR-HEX-STRING-IN-PRODUCTION"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    COOKIE_SECURE: bool = False  # Set True in HTTPS production
    BCRYPT_ROUNDS: int = 12
    RATE_LIMIT_ENABLED: bool = True

    # ── CORS ─────────────────────────────────────────────────────────
    CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # ── Admin policy ─────────────────────────────────────────────────
    # Registrants on this list become admins on the Enterprise plan.
    ADMIN_EMAILS: Annotated[list[str], NoDecode] = []
    # Legacy rule: any e-mail whose local part contains "admin" is an admin.
    ADMIN_SUBSTRING_RULE: bool = True

    @field_validator("CORS_ORIGINS", "ADMIN_EMAILS", mode="before")
    @classmethod
    def _parse_csv(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v  # type: ignore[return-value]

    @field_validator("ADMIN_EMAILS")
    @classmethod
    def _lower_admin_emails(cls, v: list[str]) -> list[str]:
        return [e.lower() for e in v]

    # ── Gemini (enhancement + grounded search) ──────────────────────
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 20.0
    SEARCH_MAX_SOURCES: int = 6

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── Default admin (seeded on first startup) ─────────────────────
    FIRST_ADMIN_EMAIL: str = "admin@ideaflow.local"
    FIRST_ADMIN_PASSWORD: str = "changeme123"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()

if settings.SECRET_KEY == "CHANGE-ME-TO-A-RANDOM-64-CHAR-HEX-STRING-IN-PRODUCTION":
    import logging

    logging.getLogger("ideaflow.core.config").warning(
        "⚠️  WARNING: You are running with the default INSECURE Secret Key! "
        "Update the SECRET_KEY in your .env file immediately."
    )
