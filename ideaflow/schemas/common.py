"""Shared pydantic base and small response envelopes."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive timestamps (no offset in the stored text) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire / on disk."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def merge_tags(*groups: list[str] | None) -> list[str]:
    """Union of tag lists, first occurrence wins, blanks dropped."""
    seen: list[str] = []
    for group in groups:
        for tag in group or []:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
    return seen


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class DeleteResponse(BaseModel):
    success: bool
    message: str


class LogoutResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    db: bool
    gateway_configured: bool
    version: str
