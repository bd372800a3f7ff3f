"""Tests for the idea bank and deep search endpoints."""

import pytest
from httpx import AsyncClient

from conftest import FakeGateway


@pytest.mark.asyncio
async def test_capture_idea_enhanced(async_client: AsyncClient, register_user, gateway: FakeGateway):
    headers = await register_user("i@x.com")
    resp = await async_client.post(
        "/api/v1/ideas",
        json={"content": "Buy milk", "source": "Typed", "category": "Task", "tags": []},
        headers=headers,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["tags"] == ["errand"]
    assert data["aiSummary"] == "Grocery reminder"
    assert data["starred"] is False
    assert gateway.enhanced == ["Buy milk"]


@pytest.mark.asyncio
async def test_capture_without_ai(async_client: AsyncClient, register_user):
    """No API key configured: the idea is saved unenhanced."""
    headers = await register_user("plain@x.com")
    resp = await async_client.post(
        "/api/v1/ideas", json={"content": "Call Sam", "tags": ["phone"]}, headers=headers
    )
    assert resp.status_code == 201
    assert resp.json()["tags"] == ["phone"]
    assert resp.json().get("aiSummary") is None


@pytest.mark.asyncio
async def test_empty_idea_rejected(async_client: AsyncClient, register_user):
    headers = await register_user("e@x.com")
    resp = await async_client.post("/api/v1/ideas", json={"content": "   "}, headers=headers)
    assert resp.status_code == 400
    listed = await async_client.get("/api/v1/ideas", headers=headers)
    assert listed.json() == []


@pytest.mark.asyncio
async def test_list_filters_and_scoping(async_client: AsyncClient, register_user):
    alice = await register_user("alice@x.com")
    bob = await register_user("bob@x.com")

    await async_client.post("/api/v1/ideas", json={"content": "Launch plan", "category": "Project"}, headers=alice)
    await async_client.post("/api/v1/ideas", json={"content": "Groceries", "category": "Task"}, headers=alice)
    await async_client.post("/api/v1/ideas", json={"content": "Launch party"}, headers=bob)

    mine = await async_client.get("/api/v1/ideas", headers=alice)
    assert [i["content"] for i in mine.json()] == ["Groceries", "Launch plan"]

    found = await async_client.get("/api/v1/ideas", params={"q": "launch"}, headers=alice)
    assert [i["content"] for i in found.json()] == ["Launch plan"]

    by_cat = await async_client.get("/api/v1/ideas", params={"category": "Task"}, headers=alice)
    assert [i["content"] for i in by_cat.json()] == ["Groceries"]

    bad = await async_client.get("/api/v1/ideas", params={"category": "Nope"}, headers=alice)
    assert bad.status_code == 422


@pytest.mark.asyncio
async def test_other_users_idea_is_not_found(async_client: AsyncClient, register_user):
    alice = await register_user("alice@x.com")
    mallory = await register_user("mallory@x.com")
    created = await async_client.post("/api/v1/ideas", json={"content": "secret"}, headers=alice)
    idea_id = created.json()["id"]

    for method, path in [
        ("GET", f"/api/v1/ideas/{idea_id}"),
        ("POST", f"/api/v1/ideas/{idea_id}/star"),
        ("DELETE", f"/api/v1/ideas/{idea_id}"),
    ]:
        resp = await async_client.request(method, path, headers=mallory)
        assert resp.status_code == 404, path

    still_there = await async_client.get(f"/api/v1/ideas/{idea_id}", headers=alice)
    assert still_there.status_code == 200


@pytest.mark.asyncio
async def test_edit_star_tag_delete(async_client: AsyncClient, register_user):
    headers = await register_user("edit@x.com")
    created = await async_client.post("/api/v1/ideas", json={"content": "draft", "tags": ["a"]}, headers=headers)
    idea_id = created.json()["id"]

    edited = await async_client.patch(f"/api/v1/ideas/{idea_id}", json={"content": "final"}, headers=headers)
    assert edited.json()["content"] == "final"

    starred = await async_client.post(f"/api/v1/ideas/{idea_id}/star", headers=headers)
    assert starred.json()["starred"] is True

    tagged = await async_client.post(f"/api/v1/ideas/{idea_id}/tags", json={"tags": ["b", "a"]}, headers=headers)
    assert tagged.json()["tags"] == ["a", "b"]

    deleted = await async_client.delete(f"/api/v1/ideas/{idea_id}", headers=headers)
    assert deleted.json()["success"] is True
    missing = await async_client.get(f"/api/v1/ideas/{idea_id}", headers=headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_stats(async_client: AsyncClient, register_user):
    headers = await register_user("stats@x.com")
    await async_client.post("/api/v1/ideas", json={"content": "one", "source": "Voice"}, headers=headers)
    await async_client.post("/api/v1/ideas", json={"content": "two"}, headers=headers)

    resp = await async_client.get("/api/v1/ideas/stats", headers=headers)
    assert resp.json() == {"total": 2, "voice": 1, "typed": 1, "today": 2}


@pytest.mark.asyncio
async def test_search_requires_paid_plan(async_client: AsyncClient, register_user, gateway: FakeGateway):
    headers = await register_user("free@x.com")
    resp = await async_client.post("/api/v1/search", json={"query": "note apps"}, headers=headers)
    assert resp.status_code == 402
    assert "upgrade" in resp.json()["detail"]
    assert gateway.searched == []


@pytest.mark.asyncio
async def test_search_for_pro(async_client: AsyncClient, register_user, gateway: FakeGateway):
    headers = await register_user("pro@x.com")
    await async_client.post("/api/v1/billing/subscribe", json={"plan": "Pro"}, headers=headers)

    resp = await async_client.post("/api/v1/search", json={"query": "note apps"}, headers=headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["sources"] == [{"title": "Example", "uri": "https://example.com"}]
    assert gateway.searched == ["note apps"]


@pytest.mark.asyncio
async def test_search_failure_degrades(async_client: AsyncClient, register_user, gateway: FakeGateway):
    gateway.search_result = None
    headers = await register_user("owner@ideaflow.test")  # allow-listed: Enterprise

    resp = await async_client.post("/api/v1/search", json={"query": "anything"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "text": None, "sources": []}
