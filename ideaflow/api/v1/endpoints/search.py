"""
Deep search endpoint: Gemini grounded web search for paid plans.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ideaflow.api.v1.deps import get_current_user, get_gateway
from ideaflow.schemas.enhancement import SearchRequest, SearchResponse
from ideaflow.schemas.user import SubscriptionPlan, User
from ideaflow.services.gateway import EnhancementGateway

router = APIRouter(tags=["search"])
logger = logging.getLogger(__name__)


@router.post("/search", response_model=SearchResponse)
async def deep_search(
    body: SearchRequest,
    current_user: User = Depends(get_current_user),
    gateway: EnhancementGateway = Depends(get_gateway),
) -> SearchResponse:
    """Free plan is refused with an upgrade prompt; failures return ``success: false``."""
    if current_user.subscription_plan == SubscriptionPlan.FREE:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Deep Search is a Pro feature. Please upgrade to use it!",
        )

    result = await gateway.search(body.query)
    if result is None:
        return SearchResponse(success=False)
    logger.info("Search for user %s returned %d sources", current_user.id, len(result.sources))
    return SearchResponse(success=True, text=result.text, sources=result.sources)
