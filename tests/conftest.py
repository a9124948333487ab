"""
Test infrastructure for the Comment Board API.

Strategy
--------
- SQLite in-memory via aiosqlite: no database server needed in CI.
- StaticPool makes every session share the one in-memory connection, which
  is required because an in-memory SQLite database is connection-scoped.
- A fresh engine (and therefore a fresh, empty database) is built for every
  test through ``Database``, so the query-count listener is installed the
  same way as in production.
- ``get_store`` and ``get_cache`` are overridden so requests use the test
  ``CommentStore`` and its ``CacheManager``.
  The ASGI lifespan never runs under ``ASGITransport``, so the production
  database is never touched.
- Each test gets its own ``CacheManager`` with no Redis client, which it
  treats as "no cache".  ``fake_redis`` swaps in an in-memory stand-in
  for tests that exercise caching.
"""
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from comment_board.cache import CacheManager
from comment_board.database import Database
from comment_board.dependencies import get_cache, get_store
from comment_board.main import app
from comment_board.services.comment_service import CommentStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeRedis:
    """The subset of ``redis.asyncio.Redis`` that CacheManager calls."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)

    async def exists(self, *keys):
        return sum(key in self.data for key in keys)

    async def aclose(self):
        pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def database() -> Database:
    """A ``Database`` over a private in-memory SQLite with the schema created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def cache_manager() -> CacheManager:
    return CacheManager()


@pytest_asyncio.fixture
async def store(database: Database, cache_manager: CacheManager) -> CommentStore:
    return CommentStore(database.sessionmaker, cache=cache_manager, detail_ttl=60)


@pytest_asyncio.fixture
async def fake_redis(cache_manager: CacheManager) -> FakeRedis:
    fake = FakeRedis()
    cache_manager._redis = fake
    return fake


@pytest_asyncio.fixture
async def async_client(store: CommentStore, cache_manager: CacheManager) -> AsyncClient:
    """An httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_cache] = lambda: cache_manager
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
