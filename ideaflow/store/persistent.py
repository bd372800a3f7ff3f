"""
Key-value persistence for the four logical collections.

A store maps a fixed key (``users``, ``ideas``, ``cms-content``,
``active-session``) to a JSON document and always replaces the whole
value on write.  Two adapters ship:

* :class:`SqlStore`: one ``stored_collections`` row per key, bound to an
  ``AsyncSession`` (one per request).
* :class:`MemoryStore`: JSON text held in a dict; used by embedders and
  tests that do not want a database.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ideaflow.core.exceptions import DecodeFailure, StorageFailure
from ideaflow.models.stored_collection import StoredCollection

logger = logging.getLogger(__name__)


class StoreKey(str, Enum):
    USERS = "users"
    IDEAS = "ideas"
    ACTIVE_SESSION = "active-session"
    CMS_CONTENT = "cms-content"


def _check_key(key: StoreKey | str) -> str:
    try:
        return StoreKey(key).value
    except ValueError:
        raise ValueError(f"Unknown store key: {key!r}") from None


def _decode(key: str, text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise DecodeFailure(f"Stored value for '{key}' is not valid JSON") from exc


class KeyLocks:
    """Per-key ``asyncio.Lock`` registry serializing read-modify-write cycles."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock


# Shared by every per-request SqlStore in this process
default_locks = KeyLocks()


class PersistentStore:
    """Adapter interface. ``read`` returns ``None`` for a missing key."""

    def __init__(self, locks: KeyLocks | None = None) -> None:
        self._locks = locks or KeyLocks()

    def lock(self, key: StoreKey | str) -> asyncio.Lock:
        return self._locks.get(_check_key(key))

    async def read(self, key: StoreKey | str) -> Any | None:
        raise NotImplementedError

    async def write(self, key: StoreKey | str, value: Any) -> None:
        raise NotImplementedError

    async def remove(self, key: StoreKey | str) -> None:
        raise NotImplementedError


class MemoryStore(PersistentStore):
    def __init__(self, initial: dict[str, str] | None = None, locks: KeyLocks | None = None) -> None:
        super().__init__(locks)
        # Raw JSON text, so decode failures behave like the SQL adapter
        self.data: dict[str, str] = dict(initial or {})

    async def read(self, key: StoreKey | str) -> Any | None:
        k = _check_key(key)
        if k not in self.data:
            return None
        return _decode(k, self.data[k])

    async def write(self, key: StoreKey | str, value: Any) -> None:
        k = _check_key(key)
        self.data[k] = json.dumps(value)

    async def remove(self, key: StoreKey | str) -> None:
        self.data.pop(_check_key(key), None)


class SqlStore(PersistentStore):
    def __init__(self, db: AsyncSession, locks: KeyLocks | None = None) -> None:
        super().__init__(locks or default_locks)
        self._db = db

    async def _row(self, key: str) -> StoredCollection | None:
        return await self._db.get(StoredCollection, key, populate_existing=True)

    async def read(self, key: StoreKey | str) -> Any | None:
        k = _check_key(key)
        try:
            row = await self._row(k)
        except SQLAlchemyError as exc:
            raise StorageFailure() from exc
        if row is None:
            return None
        return _decode(k, row.value)

    async def write(self, key: StoreKey | str, value: Any) -> None:
        k = _check_key(key)
        text = json.dumps(value)
        try:
            row = await self._row(k)
            if row is None:
                self._db.add(StoredCollection(key=k, value=text, revision=1))
            else:
                row.value = text
                row.revision = (row.revision or 0) + 1
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to persist '%s': %s", k, exc)
            raise StorageFailure() from exc

    async def remove(self, key: StoreKey | str) -> None:
        k = _check_key(key)
        try:
            row = await self._row(k)
            if row is not None:
                await self._db.delete(row)
                await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to remove '%s': %s", k, exc)
            raise StorageFailure() from exc
