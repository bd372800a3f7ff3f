"""
CMS announcement endpoints.

Reading active / featured announcements is public; the full list,
creation and deletion are admin only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ideaflow.api.v1.deps import get_board, require_admin
from ideaflow.schemas.announcement import Announcement, AnnouncementCreate
from ideaflow.schemas.common import DeleteResponse
from ideaflow.schemas.user import User
from ideaflow.services.announcements import AnnouncementBoard

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("", response_model=list[Announcement])
async def list_active_announcements(
    board: AnnouncementBoard = Depends(get_board),
) -> list[Announcement]:
    return await board.list_active()


@router.get("/featured", response_model=Announcement | None)
async def featured_announcement(
    board: AnnouncementBoard = Depends(get_board),
) -> Announcement | None:
    """Newest active announcement, or ``null``."""
    return await board.featured()


@router.get("/all", response_model=list[Announcement])
async def list_all_announcements(
    board: AnnouncementBoard = Depends(get_board),
    _admin: User = Depends(require_admin),
) -> list[Announcement]:
    return await board.list()


@router.post("", response_model=Announcement, status_code=201)
async def create_announcement(
    body: AnnouncementCreate,
    board: AnnouncementBoard = Depends(get_board),
    _admin: User = Depends(require_admin),
) -> Announcement:
    return await board.create(body.title, body.text, body.is_active, body.image_url)


@router.delete("/{announcement_id}", response_model=DeleteResponse)
async def delete_announcement(
    announcement_id: str,
    board: AnnouncementBoard = Depends(get_board),
    _admin: User = Depends(require_admin),
) -> DeleteResponse:
    await board.delete(announcement_id)
    return DeleteResponse(success=True, message="Announcement deleted")
