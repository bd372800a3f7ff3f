"""
Shared test fixtures for the IdeaFlow test suite.

Async throughout (aiosqlite + AsyncSession); the Gemini gateway is
replaced by an in-process fake so no test touches the network.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = "*"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["GEMINI_API_KEY"] = ""
os.environ["ADMIN_EMAILS"] = "owner@ideaflow.test"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ideaflow.api.v1.deps import get_db, get_gateway
from ideaflow.db.base import Base
from ideaflow.main import app
from ideaflow.schemas.enhancement import EnhancementResult, SearchResult, WebSource
from ideaflow.store.persistent import MemoryStore

# Create a test engine for the entire session
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class FakeGateway:
    """Stands in for EnhancementGateway; records every call."""

    def __init__(
        self,
        enhancement: EnhancementResult | None = None,
        search_result: SearchResult | None = None,
    ) -> None:
        self.api_key = "fake"
        self.enhancement = enhancement
        self.search_result = search_result
        self.enhanced: list[str] = []
        self.searched: list[str] = []

    async def enhance(self, content: str) -> EnhancementResult | None:
        self.enhanced.append(content)
        return self.enhancement

    async def search(self, query: str) -> SearchResult | None:
        self.searched.append(query)
        return self.search_result


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
def gateway() -> FakeGateway:
    """Fake gateway wired into the app for the duration of one test."""
    fake = FakeGateway(
        enhancement=EnhancementResult(summary="Grocery reminder", tags=["errand"]),
        search_result=SearchResult(
            text="## Summary",
            sources=[WebSource(title="Example", uri="https://example.com")],
        ),
    )
    app.dependency_overrides[get_gateway] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_gateway, None)


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def register_user(async_client: AsyncClient):
    """Register through the API and return Authorization headers."""

    async def _register(email: str, password: str = "secret-pw", username: str = "Tester") -> dict:
        resp = await async_client.post(
            "/api/v1/auth/register",
            json={"email": email, "password": password, "username": username},
        )
        assert resp.status_code == 201, resp.text
        token = resp.json()["access_token"]
        # Keep cookie auth out of multi-user tests; headers decide who is calling
        async_client.cookies.clear()
        return {"Authorization": f"Bearer {token}"}

    return _register
