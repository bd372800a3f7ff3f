"""
FastAPI dependencies: storage, services, and auth guards.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.core.config import settings
from ideaflow.core.security import decode_access_token
from ideaflow.db.session import async_session_factory
from ideaflow.schemas.user import User
from ideaflow.services.announcements import AnnouncementBoard
from ideaflow.services.auth import ActiveSession, SessionManager
from ideaflow.services.directory import UserDirectory
from ideaflow.services.gateway import EnhancementGateway
from ideaflow.services.ideas import IdeaBank
from ideaflow.store.persistent import PersistentStore, SqlStore

# We use auto_error=False so we can manually check for the cookie if header is missing
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)

_gateway = EnhancementGateway()


# ── Database session / store ────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_store(db: AsyncSession = Depends(get_db)) -> PersistentStore:
    return SqlStore(db)


def get_gateway() -> EnhancementGateway:
    return _gateway


# ── Auth dependencies ───────────────────────────────────────────────
def _bearer_from(token: Optional[str], cookie: Optional[str]) -> Optional[str]:
    # Priority: Header > Cookie ("Bearer <token>" or bare token)
    if token:
        return token
    if cookie:
        return cookie.split(" ", 1)[1] if cookie.startswith("Bearer ") else cookie
    return None


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),  # Read from HttpOnly Cookie
    store: PersistentStore = Depends(get_store),
) -> User | None:
    final_token = _bearer_from(token, access_token)
    if not final_token:
        return None
    payload = decode_access_token(final_token)
    if payload is None or payload.get("sub") is None:
        return None
    return await SessionManager(store).lookup(str(payload["sub"]))


async def get_current_user(
    user: User | None = Depends(get_optional_user),
) -> User:
    """Decode JWT from Header OR Cookie, look up user."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """Only allow admins to proceed."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


# ── Services ────────────────────────────────────────────────────────
async def get_session_manager(
    store: PersistentStore = Depends(get_store),
    user: User | None = Depends(get_optional_user),
) -> SessionManager:
    return SessionManager(store, ActiveSession(user))


async def get_directory(store: PersistentStore = Depends(get_store)) -> UserDirectory:
    return UserDirectory(store)


async def get_idea_bank(
    store: PersistentStore = Depends(get_store),
    gateway: EnhancementGateway = Depends(get_gateway),
) -> IdeaBank:
    return IdeaBank(store, gateway)


async def get_board(store: PersistentStore = Depends(get_store)) -> AnnouncementBoard:
    return AnnouncementBoard(store)
