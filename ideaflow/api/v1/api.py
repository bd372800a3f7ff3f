"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from ideaflow.api.v1.endpoints import (announcements, auth, billing, health,
                                       ideas, search, users)

api_router = APIRouter()

# Auth (register, login, refresh, own profile)
api_router.include_router(auth.router)
api_router.include_router(billing.router)

# Idea bank and deep search
api_router.include_router(ideas.router)
api_router.include_router(search.router)

# Admin: user management and CMS
api_router.include_router(users.router)
api_router.include_router(announcements.router)

api_router.include_router(health.router)
