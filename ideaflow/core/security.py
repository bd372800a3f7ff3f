"""
JWT token creation / verification and password hashing (bcrypt).

Stored records written by the old browser client carry plaintext
passwords; ``verify_password`` still accepts those so the caller can
re-hash them on the next successful login.
"""

from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from ideaflow.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


# ── Passwords ───────────────────────────────────────────────────────
def is_password_hash(value: str) -> bool:
    return bool(value) and pwd_context.identify(value) is not None


def verify_password(plain: str, stored: str) -> bool:
    if not stored:
        return False
    if is_password_hash(stored):
        return pwd_context.verify(plain, stored)
    # Legacy plaintext value
    return hmac.compare_digest(plain.encode("utf-8"), stored.encode("utf-8"))


def needs_rehash(stored: str) -> bool:
    return not is_password_hash(stored) or pwd_context.needs_update(stored)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
def create_access_token(
    subject: str | Any,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode(
        {"exp": expire, "sub": str(subject), "type": "access"},
        _SECRET,
        algorithm=_ALGORITHM,
    )


def create_refresh_token(subject: str | Any) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return jwt.encode(
        {"exp": expire, "sub": str(subject), "type": "refresh"},
        _SECRET,
        algorithm=_ALGORITHM,
    )


def _decode(token: str, expected_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != expected_type:
        return None
    return payload


def decode_access_token(token: str) -> dict | None:
    """Return payload dict if *access* token is valid, else ``None``."""
    return _decode(token, "access")


def decode_refresh_token(token: str) -> dict | None:
    """Return payload dict if *refresh* token is valid, else ``None``."""
    return _decode(token, "refresh")
