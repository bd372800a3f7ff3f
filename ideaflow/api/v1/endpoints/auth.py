"""
Auth endpoints: register, login (OAuth2 password flow), token refresh,
logout, password recovery and the caller's own profile.
"""

from __future__ import annotations

import logging

from fastapi import (APIRouter, Cookie, Depends, HTTPException, Request,
                     Response, status)
from fastapi.security import OAuth2PasswordRequestForm
from slowapi import Limiter
from slowapi.util import get_remote_address

from ideaflow.api.v1.deps import (get_current_user, get_session_manager,
                                  get_store)
from ideaflow.core.config import settings
from ideaflow.core.security import (create_access_token, create_refresh_token,
                                    decode_refresh_token)
from ideaflow.schemas.common import LogoutResponse, MessageResponse
from ideaflow.schemas.token import RefreshRequest, Token
from ideaflow.schemas.user import (ProfileUpdate, RecoveryRequest,
                                   RegisterRequest, User, UserRead)
from ideaflow.services.auth import SessionManager
from ideaflow.store.persistent import PersistentStore

# Rate limiter: keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _issue_tokens(response: Response, user: User) -> Token:
    """Create an access/refresh pair and set them as HttpOnly cookies."""
    access_token = create_access_token(user.id)
    refresh_token = create_refresh_token(user.id)

    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,  # Set to True in HTTPS production
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    response.set_cookie(
        key="refresh_token",
        value=refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )

    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=Token, status_code=201)
@limiter.limit("5/minute")
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> Token:
    """Create an account and start a session for it."""
    user = await manager.register(body.email, body.username, body.password)
    return _issue_tokens(response, user)


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
async def login_for_access_token(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    manager: SessionManager = Depends(get_session_manager),
) -> Token:
    """Authenticate with email/password. Returns 200 OK with HttpOnly Cookies."""
    user = await manager.login(form_data.username, form_data.password)
    return _issue_tokens(response, user)


@router.post("/refresh", response_model=Token)
@limiter.limit("10/minute")
async def refresh_access_token_endpoint(
    response: Response,
    request: Request,
    body: RefreshRequest | None = None,
    refresh_token_cookie: str | None = Cookie(None, alias="refresh_token"),
    store: PersistentStore = Depends(get_store),
) -> Token:
    # Priority: Body > Cookie
    token_str = None
    if body and body.refresh_token:
        token_str = body.refresh_token
    elif refresh_token_cookie:
        token_str = refresh_token_cookie

    if not token_str:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token missing",
        )

    payload = decode_refresh_token(token_str)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token",
        )

    user = await SessionManager(store).lookup(str(payload.get("sub")))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return _issue_tokens(response, user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    response: Response,
    manager: SessionManager = Depends(get_session_manager),
) -> LogoutResponse:
    """Clear auth cookies and end the session."""
    await manager.logout()
    response.delete_cookie("access_token")
    response.delete_cookie("refresh_token")
    return LogoutResponse(message="Logged out")


@router.post("/recover", response_model=MessageResponse)
async def request_password_recovery(
    body: RecoveryRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> MessageResponse:
    """Simulated recovery: always reports success."""
    await manager.request_recovery(body.email)
    return MessageResponse(message="Password recovery link sent to email (Simulated).")


# ── Own profile ─────────────────────────────────────────────────────
@router.get("/me", response_model=UserRead)
async def read_current_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Return profile of the currently authenticated user."""
    return current_user


@router.patch("/me", response_model=UserRead)
async def update_current_user(
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
) -> User:
    """Edit username, password, or notification / tour flags."""
    return await manager.update_profile(current_user.id, body)


@router.post("/me/tour", response_model=UserRead)
async def complete_onboarding_tour(
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
) -> User:
    return await manager.complete_tour(current_user.id)
