"""Tests for the CMS announcement board."""

import json

import pytest

from ideaflow.core.exceptions import NotFound
from ideaflow.services.announcements import AnnouncementBoard
from ideaflow.store.persistent import MemoryStore


@pytest.mark.asyncio
async def test_featured_is_newest_active(memory_store: MemoryStore):
    board = AnnouncementBoard(memory_store)
    await board.create("A", "first")
    b = await board.create("B", "second")

    assert (await board.featured()).id == b.id


@pytest.mark.asyncio
async def test_inactive_never_featured(memory_store: MemoryStore):
    board = AnnouncementBoard(memory_store)
    a = await board.create("A", "live")
    await board.create("B", "draft", is_active=False)

    assert (await board.featured()).id == a.id
    assert [x.id for x in await board.list_active()] == [a.id]
    assert len(await board.list()) == 2


@pytest.mark.asyncio
async def test_featured_empty(memory_store: MemoryStore):
    assert await AnnouncementBoard(memory_store).featured() is None


@pytest.mark.asyncio
async def test_blank_title_gets_default(memory_store: MemoryStore):
    item = await AnnouncementBoard(memory_store).create("  ", image_url="")
    assert item.title == "New Announcement"
    assert item.image_url is None


@pytest.mark.asyncio
async def test_delete(memory_store: MemoryStore):
    board = AnnouncementBoard(memory_store)
    item = await board.create("Gone soon")
    await board.delete(item.id)
    assert await board.list() == []
    with pytest.raises(NotFound):
        await board.delete(item.id)


@pytest.mark.asyncio
async def test_list_with_naive_timestamps(memory_store: MemoryStore):
    memory_store.data["cms-content"] = json.dumps([
        {"id": "a", "title": "Older", "createdAt": "2024-01-01T00:00:00"},
        {"id": "b", "title": "Newer", "createdAt": "2024-06-01T00:00:00Z"},
    ])
    board = AnnouncementBoard(memory_store)
    assert [a.title for a in await board.list()] == ["Newer", "Older"]
    assert (await board.featured()).id == "b"
