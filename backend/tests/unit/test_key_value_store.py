"""
Unit tests for key/value store implementations.
"""

import pytest

from tessera.infrastructure.local.key_value_store import SqliteKeyValueStore
from tessera.infrastructure.local.memory_store import InMemoryKeyValueStore


@pytest.fixture
async def sqlite_store():
    """Create in-memory SQLite key/value store."""
    # Use in-memory SQLite
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
    from sqlalchemy.orm import sessionmaker

    from tessera.infrastructure.local.database import Base

    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    store = SqliteKeyValueStore(session_factory)

    yield store

    await engine.dispose()


@pytest.fixture(params=["memory", "sqlite"])
async def store(request, sqlite_store):
    if request.param == "memory":
        return InMemoryKeyValueStore()
    return sqlite_store


@pytest.mark.asyncio
async def test_get_missing_key(store):
    assert await store.get("tessera:nothing") is None


@pytest.mark.asyncio
async def test_set_then_get(store):
    await store.set("tessera:k", '{"a": 1}')
    assert await store.get("tessera:k") == '{"a": 1}'


@pytest.mark.asyncio
async def test_set_replaces_value(store):
    await store.set("tessera:k", "first")
    await store.set("tessera:k", "second")
    assert await store.get("tessera:k") == "second"


@pytest.mark.asyncio
async def test_delete(store):
    await store.set("tessera:k", "value")
    assert await store.delete("tessera:k") is True
    assert await store.get("tessera:k") is None
    assert await store.delete("tessera:k") is False
