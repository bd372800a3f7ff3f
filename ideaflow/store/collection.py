"""
Indexed in-memory view of one stored collection.

Entities are kept in an insertion-ordered ``id -> entity`` map so the
services get per-entity CRUD, while the adapter still receives the whole
sequence (newest first, as the browser client wrote it).
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Callable, Iterator
from contextlib import asynccontextmanager
from typing import Generic, TypeVar

from pydantic import ValidationError

from ideaflow.core.exceptions import DecodeFailure
from ideaflow.schemas.common import CamelModel
from ideaflow.store.persistent import PersistentStore, StoreKey

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=CamelModel)


class Collection(Generic[T]):
    def __init__(self, store: PersistentStore, key: StoreKey, model: type[T]) -> None:
        self._store = store
        self._key = key
        self._model = model
        self._items: dict[str, T] = {}
        self._held: list = []

    async def load(self) -> None:
        """Replace the in-memory view with what the store holds."""
        try:
            raw = await self._store.read(self._key)
        except DecodeFailure as exc:
            logger.warning("Treating '%s' as empty: %s", self._key.value, exc)
            raw = None

        if raw is None:
            raw = []
        elif not isinstance(raw, list):
            logger.warning("Treating '%s' as empty: expected a list", self._key.value)
            raw = []

        items: dict[str, T] = {}
        held: list = []
        for entry in raw:
            try:
                item = self._model.model_validate(entry)
            except ValidationError as exc:
                logger.warning(
                    "Keeping malformed %s entry in '%s' unchanged: %s",
                    self._model.__name__, self._key.value, exc.error_count(),
                )
                held.append(entry)
                continue
            if item.id in items:
                logger.warning("Keeping duplicate id %s in '%s' unchanged", item.id, self._key.value)
                held.append(entry)
                continue
            items[item.id] = item
        self._items = items
        self._held = held

    async def save(self) -> None:
        """Write the entities back, followed by any entries ``load`` could not use."""
        await self._store.write(
            self._key,
            [item.to_storage() for item in self._items.values()] + self._held,
        )

    @asynccontextmanager
    async def editing(self) -> AsyncIterator[Collection[T]]:
        """Lock the key, reload, yield for mutation, then persist.

        Nothing is written if the body raises.
        """
        async with self._store.lock(self._key):
            await self.load()
            yield self
            await self.save()

    # ── Per-entity access ──────────────────────────────────────────
    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def get(self, entity_id: str) -> T | None:
        return self._items.get(entity_id)

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        return next((item for item in self._items.values() if predicate(item)), None)

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        return [item for item in self._items.values() if predicate(item)]

    def prepend(self, item: T) -> T:
        self._items = {item.id: item, **{k: v for k, v in self._items.items() if k != item.id}}
        return item

    def append(self, item: T) -> T:
        self._items.pop(item.id, None)
        self._items[item.id] = item
        return item

    def replace(self, item: T) -> T:
        """Swap an existing entity in place, keeping its position."""
        if item.id not in self._items:
            raise KeyError(item.id)
        self._items[item.id] = item
        return item

    def pop(self, entity_id: str) -> T | None:
        return self._items.pop(entity_id, None)

    def new_id(self) -> str:
        """Millisecond timestamp id, bumped until unused in this collection."""
        candidate = int(time.time() * 1000)
        taken = set(self._items) | {str(e.get("id")) for e in self._held if isinstance(e, dict)}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)
