"""
Idea bank: capture, owner-scoped queries, edits and stats.

Mutations accept an optional ``owner_id``; when given, an idea owned by
someone else is reported as missing.  The HTTP layer always passes it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ideaflow.core.exceptions import EmptyContent, NotFound, ValidationFailure
from ideaflow.schemas.common import merge_tags
from ideaflow.schemas.idea import (ALL_CATEGORIES, Category, Idea, IdeaSource,
                                   IdeaStats, IdeaUpdate)
from ideaflow.services.gateway import EnhancementGateway
from ideaflow.store.collection import Collection
from ideaflow.store.persistent import PersistentStore, StoreKey

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {"content", "category", "tags", "starred"}


def _matches(idea: Idea, needle: str) -> bool:
    return needle in idea.content.lower() or any(needle in t.lower() for t in idea.tags)


class IdeaBank:
    def __init__(self, store: PersistentStore, gateway: EnhancementGateway | None = None) -> None:
        self._ideas: Collection[Idea] = Collection(store, StoreKey.IDEAS, Idea)
        self._gateway = gateway

    @staticmethod
    def _owned(ideas: Collection[Idea], idea_id: str, owner_id: str | None) -> Idea:
        idea = ideas.get(idea_id)
        if idea is None or (owner_id is not None and idea.user_id != owner_id):
            raise NotFound("Idea not found")
        return idea

    async def add(
        self,
        owner_id: str,
        content: str,
        source: IdeaSource = IdeaSource.TYPED,
        category: Category = Category.NOTE,
        tags: list[str] | None = None,
    ) -> Idea:
        if not content or not content.strip():
            raise EmptyContent()

        # Remote call happens before the collection is locked
        enhancement = await self._gateway.enhance(content) if self._gateway else None

        async with self._ideas.editing() as ideas:
            idea = ideas.prepend(
                Idea(
                    id=ideas.new_id(),
                    user_id=owner_id,
                    content=content,
                    source=source,
                    category=category,
                    tags=merge_tags(tags, enhancement.tags if enhancement else None),
                    starred=False,
                    ai_summary=(enhancement.summary or None) if enhancement else None,
                )
            )
        logger.info(
            "Captured idea %s for %s (%s, enhanced=%s)",
            idea.id, owner_id, idea.source.value, enhancement is not None,
        )
        return idea.model_copy()

    async def query(
        self,
        owner_id: str,
        text: str = "",
        category: Category | str = ALL_CATEGORIES,
    ) -> list[Idea]:
        await self._ideas.load()
        needle = text.lower()
        wanted = None if category in (None, ALL_CATEGORIES) else Category(category)
        return [
            idea.model_copy()
            for idea in self._ideas
            if idea.user_id == owner_id
            and _matches(idea, needle)
            and (wanted is None or idea.category == wanted)
        ]

    async def get(self, idea_id: str, owner_id: str | None = None) -> Idea:
        await self._ideas.load()
        return self._owned(self._ideas, idea_id, owner_id).model_copy()

    async def toggle_star(self, idea_id: str, owner_id: str | None = None) -> Idea:
        async with self._ideas.editing() as ideas:
            idea = self._owned(ideas, idea_id, owner_id)
            idea = ideas.replace(idea.model_copy(update={"starred": not idea.starred}))
        return idea.model_copy()

    async def update(
        self,
        idea_id: str,
        fields: dict[str, Any] | IdeaUpdate,
        owner_id: str | None = None,
    ) -> Idea:
        if isinstance(fields, IdeaUpdate):
            fields = fields.model_dump(exclude_unset=True, exclude_none=True)

        rejected = set(fields) - _EDITABLE_FIELDS
        if rejected:
            raise ValidationFailure(f"Cannot update field(s): {', '.join(sorted(rejected))}")
        if "content" in fields and not (fields["content"] or "").strip():
            raise EmptyContent()

        async with self._ideas.editing() as ideas:
            current = self._owned(ideas, idea_id, owner_id)
            idea = ideas.replace(Idea.model_validate({**current.model_dump(), **fields}))
        logger.info("Updated idea %s: %s", idea_id, sorted(fields))
        return idea.model_copy()

    async def add_tags(self, idea_id: str, tags: list[str], owner_id: str | None = None) -> Idea:
        async with self._ideas.editing() as ideas:
            current = self._owned(ideas, idea_id, owner_id)
            idea = ideas.replace(current.model_copy(update={"tags": merge_tags(current.tags, tags)}))
        return idea.model_copy()

    async def delete(self, idea_id: str, owner_id: str | None = None) -> None:
        async with self._ideas.editing() as ideas:
            self._owned(ideas, idea_id, owner_id)
            ideas.pop(idea_id)
        logger.info("Deleted idea %s", idea_id)

    async def stats(self, owner_id: str, now: datetime | None = None) -> IdeaStats:
        """Counts for one owner; "today" uses the server's local calendar date."""
        await self._ideas.load()
        today = (now or datetime.now()).astimezone().date()
        owned = self._ideas.filter(lambda i: i.user_id == owner_id)
        return IdeaStats(
            total=len(owned),
            voice=sum(1 for i in owned if i.source == IdeaSource.VOICE),
            typed=sum(1 for i in owned if i.source == IdeaSource.TYPED),
            today=sum(1 for i in owned if i.created_at.astimezone().date() == today),
        )
