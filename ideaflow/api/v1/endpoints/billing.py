"""
Billing endpoint: simulated checkout.

No payment provider is called; the requested plan is applied at once.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ideaflow.api.v1.deps import get_current_user, get_session_manager
from ideaflow.schemas.user import PlanUpdate, User, UserRead
from ideaflow.services.auth import SessionManager

router = APIRouter(prefix="/billing", tags=["billing"])


@router.post("/subscribe", response_model=UserRead)
async def subscribe(
    body: PlanUpdate,
    current_user: User = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
) -> User:
    if body.plan == current_user.subscription_plan:
        return current_user
    return await manager.subscribe(current_user.id, body.plan)
