"""Pydantic schemas for Idea records, payloads and stats."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ideaflow.schemas.common import CamelModel, as_utc, merge_tags, utcnow


class IdeaSource(str, Enum):
    VOICE = "Voice"
    TYPED = "Typed"


class Category(str, Enum):
    NOTE = "Note"
    TASK = "Task"
    INSPIRATION = "Inspiration"
    MEETING = "Meeting"
    PROJECT = "Project"
    QUESTION = "Question"


ALL_CATEGORIES = "All"


class Idea(CamelModel):
    """Stored idea record (``ideas`` collection)."""

    id: str
    user_id: str
    content: str
    source: IdeaSource = IdeaSource.TYPED
    category: Category = Category.NOTE
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    starred: bool = False
    ai_summary: str | None = None

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, v: list[str]) -> list[str]:
        return merge_tags(v)

    @field_validator("created_at")
    @classmethod
    def _aware_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class IdeaCreate(CamelModel):
    content: str
    source: IdeaSource = IdeaSource.TYPED
    category: Category = Category.NOTE
    tags: list[str] = Field(default_factory=list)


class IdeaUpdate(CamelModel):
    content: str | None = None
    category: Category | None = None
    tags: list[str] | None = None
    starred: bool | None = None


class TagsRequest(BaseModel):
    tags: list[str]


class IdeaStats(BaseModel):
    total: int
    voice: int
    typed: int
    today: int
