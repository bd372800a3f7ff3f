"""
Idea bank endpoints: every route is scoped to the calling user.

Ideas owned by someone else are reported as 404, never 403, so ids of
other users' ideas cannot be probed.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ideaflow.api.v1.deps import get_current_user, get_idea_bank
from ideaflow.schemas.common import DeleteResponse
from ideaflow.schemas.idea import (ALL_CATEGORIES, Category, Idea, IdeaCreate,
                                   IdeaStats, IdeaUpdate, TagsRequest)
from ideaflow.schemas.user import User
from ideaflow.services.ideas import IdeaBank

router = APIRouter(prefix="/ideas", tags=["ideas"])

_CATEGORY_FILTERS = {ALL_CATEGORIES, *(c.value for c in Category)}


@router.get("", response_model=list[Idea])
async def list_ideas(
    q: str = "",
    category: str = Query(default=ALL_CATEGORIES),
    current_user: User = Depends(get_current_user),
    bank: IdeaBank = Depends(get_idea_bank),
) -> list[Idea]:
    """Search the caller's ideas by text (content or tag) and category."""
    if category not in _CATEGORY_FILTERS:
        raise HTTPException(
            status_code=422,
            detail=f"Category must be one of: {sorted(_CATEGORY_FILTERS)}",
        )
    return await bank.query(current_user.id, q, category)


@router.post("", response_model=Idea, status_code=201)
async def capture_idea(
    body: IdeaCreate,
    current_user: User = Depends(get_current_user),
    bank: IdeaBank = Depends(get_idea_bank),
) -> Idea:
    """Save a voice transcript or typed note, enhanced by AI when available."""
    return await bank.add(current_user.id, body.content, body.source, body.category, body.tags)


@router.get("/stats", response_model=IdeaStats)
async def idea_stats(
    current_user: User = Depends(get_current_user),
    bank: IdeaBank = Depends(get_idea_bank),
) -> IdeaStats:
    return await bank.stats(current_user.id)


@router.get("/{idea_id}", response_model=Idea)
async def get_idea(
    idea_id: str,
    current_user: User = Depends(get_current_user),
    bank: IdeaBank = Depends(get_idea_bank),
) -> Idea:
    return await bank.get(idea_id, owner_id=current_user.id)


@router.patch("/{idea_id}", response_model=Idea)
async def update_idea(
    idea_id: str,
    body: IdeaUpdate,
    current_user: User = Depends(get_current_user),
    bank: IdeaBank = Depends(get_idea_bank),
) -> Idea:
    return await bank.update(idea_id, body, owner_id=current_user.id)


@router.post("/{idea_id}/star", response_model=Idea)
async def toggle_star(
    idea_id: str,
    current_user: User = Depends(get_current_user),
    bank: IdeaBank = Depends(get_idea_bank),
) -> Idea:
    return await bank.toggle_star(idea_id, owner_id=current_user.id)


@router.post("/{idea_id}/tags", response_model=Idea)
async def merge_tags(
    idea_id: str,
    body: TagsRequest,
    current_user: User = Depends(get_current_user),
    bank: IdeaBank = Depends(get_idea_bank),
) -> Idea:
    return await bank.add_tags(idea_id, body.tags, owner_id=current_user.id)


@router.delete("/{idea_id}", response_model=DeleteResponse)
async def delete_idea(
    idea_id: str,
    current_user: User = Depends(get_current_user),
    bank: IdeaBank = Depends(get_idea_bank),
) -> DeleteResponse:
    await bank.delete(idea_id, owner_id=current_user.id)
    return DeleteResponse(success=True, message="Idea deleted")
