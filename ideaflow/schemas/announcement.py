"""Pydantic schemas for CMS announcements."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from ideaflow.schemas.common import CamelModel, as_utc, utcnow


class Announcement(CamelModel):
    """Stored announcement record (``cms-content`` collection)."""

    id: str
    title: str
    text: str = ""
    image_url: str | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class AnnouncementCreate(CamelModel):
    title: str = ""
    text: str = ""
    is_active: bool = True
    image_url: str | None = None
