"""Public health check."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.api.v1.deps import get_db, get_gateway
from ideaflow.core.config import settings
from ideaflow.schemas.common import HealthResponse
from ideaflow.services.gateway import EnhancementGateway

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(
    db: AsyncSession = Depends(get_db),
    gateway: EnhancementGateway = Depends(get_gateway),
) -> HealthResponse:
    """Database connectivity and whether AI enhancement is configured."""
    result = HealthResponse(db=False, gateway_configured=bool(gateway.api_key), version=settings.VERSION)

    try:
        await db.execute(text("SELECT 1"))
        result.db = True
    except SQLAlchemyError as e:
        logger.error("Health check DB failure: %s", e)

    return result
