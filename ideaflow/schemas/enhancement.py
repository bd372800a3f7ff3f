"""Pydantic schemas for the Gemini enhancement and grounded search calls."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class EnhancementResult(BaseModel):
    summary: str
    tags: list[str] = Field(default_factory=list)


class WebSource(BaseModel):
    title: str
    uri: str


class SearchResult(BaseModel):
    text: str
    sources: list[WebSource] = Field(default_factory=list)


class SearchRequest(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def _query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Query must not be empty")
        return v


class SearchResponse(BaseModel):
    success: bool
    text: str | None = None
    sources: list[WebSource] = Field(default_factory=list)
