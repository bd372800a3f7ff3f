"""
User management endpoints (admin only).

Admins cannot demote or delete themselves; those calls return 403.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ideaflow.api.v1.deps import get_directory, require_admin
from ideaflow.schemas.common import DeleteResponse
from ideaflow.schemas.user import (DirectoryCounts, PlanUpdate, User,
                                   UserCreate, UserRead, UserSortKey)
from ideaflow.services.directory import UserDirectory

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead])
async def list_users(
    q: str = "",
    sort: UserSortKey = UserSortKey.JOINED_AT,
    directory: UserDirectory = Depends(get_directory),
    _admin: User = Depends(require_admin),
) -> list[User]:
    return await directory.list(q, sort)


@router.get("/stats", response_model=DirectoryCounts)
async def user_counts(
    directory: UserDirectory = Depends(get_directory),
    _admin: User = Depends(require_admin),
) -> DirectoryCounts:
    return await directory.counts()


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    directory: UserDirectory = Depends(get_directory),
    _admin: User = Depends(require_admin),
) -> User:
    """Create a new user account (admin only)."""
    return await directory.create(
        body.username, body.email, body.password, body.is_admin, body.subscription_plan
    )


@router.post("/{user_id}/toggle-admin", response_model=UserRead)
async def toggle_admin(
    user_id: str,
    directory: UserDirectory = Depends(get_directory),
    admin: User = Depends(require_admin),
) -> User:
    return await directory.toggle_admin(user_id, admin.id)


@router.put("/{user_id}/plan", response_model=UserRead)
async def set_plan(
    user_id: str,
    body: PlanUpdate,
    directory: UserDirectory = Depends(get_directory),
    _admin: User = Depends(require_admin),
) -> User:
    return await directory.set_plan(user_id, body.plan)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: str,
    directory: UserDirectory = Depends(get_directory),
    admin: User = Depends(require_admin),
) -> DeleteResponse:
    """Delete another user. Their ideas are left in storage, unreachable."""
    await directory.delete(user_id, admin.id)
    return DeleteResponse(success=True, message="User deleted")
