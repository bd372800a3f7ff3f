"""
StoredCollection model: one row per logical collection key.

The value column holds the whole collection as JSON text, which keeps the
on-disk layout identical to what the browser client kept in local storage.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text

from ideaflow.db.base import Base


class StoredCollection(Base):
    __tablename__ = "stored_collections"

    key: str = Column(String(64), primary_key=True)  # type: ignore[assignment]
    # users | ideas | cms-content | active-session
    value: str = Column(Text, nullable=False)  # type: ignore[assignment]
    revision: int = Column(Integer, nullable=False, default=1, server_default="1")  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
