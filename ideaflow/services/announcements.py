"""Announcement board: admin-authored CMS banners."""

from __future__ import annotations

import logging

from ideaflow.core.exceptions import NotFound
from ideaflow.schemas.announcement import Announcement
from ideaflow.store.collection import Collection
from ideaflow.store.persistent import PersistentStore, StoreKey

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Announcement"


class AnnouncementBoard:
    def __init__(self, store: PersistentStore) -> None:
        self._items: Collection[Announcement] = Collection(store, StoreKey.CMS_CONTENT, Announcement)

    async def create(
        self,
        title: str,
        text: str = "",
        is_active: bool = True,
        image_url: str | None = None,
    ) -> Announcement:
        async with self._items.editing() as items:
            item = items.prepend(
                Announcement(
                    id=items.new_id(),
                    title=title.strip() or DEFAULT_TITLE,
                    text=text,
                    is_active=is_active,
                    image_url=image_url or None,
                )
            )
        logger.info("Created announcement %s (active=%s)", item.id, is_active)
        return item.model_copy()

    async def delete(self, announcement_id: str) -> None:
        async with self._items.editing() as items:
            if items.pop(announcement_id) is None:
                raise NotFound("Announcement not found")
        logger.info("Deleted announcement %s", announcement_id)

    async def list(self) -> list[Announcement]:
        """Newest first; equal timestamps keep insertion order."""
        await self._items.load()
        ordered = sorted(self._items, key=lambda a: a.created_at, reverse=True)
        return [a.model_copy() for a in ordered]

    async def list_active(self) -> list[Announcement]:
        return [a for a in await self.list() if a.is_active]

    async def featured(self) -> Announcement | None:
        active = await self.list_active()
        return active[0] if active else None
