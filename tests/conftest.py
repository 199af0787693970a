"""
Pytest configuration and fixtures for TeamForge tests.

Every test that touches the database gets its own SQLite file, so tests
never see each other's rows.
"""

import asyncio
import os
import tempfile
import time

# Point the application's own engine at a throwaway file before anything
# imports the settings.
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.mkdtemp(prefix='teamforge-'), 'app.db')}",
)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from teamforge.database import Base, get_db
from teamforge.main import app
from teamforge.services.realtime import manager
from teamforge.services.storage import Storage


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def pacific_time(monkeypatch):
    """Run the test with the process clock in a zone well away from UTC."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/Los_Angeles")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def run_with_storage(database_url):
    """Run ``scenario(storage)`` in a fresh database and return its result."""

    def runner(scenario):
        async def main():
            engine = create_async_engine(database_url, poolclass=NullPool)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
            try:
                async with session_factory() as session:
                    result = await scenario(Storage(session))
                    await session.commit()
                    return result
            finally:
                await engine.dispose()

        return asyncio.run(main())

    return runner


@pytest.fixture
def client(database_url):
    """Test client whose requests use a per-test database."""
    engine = create_async_engine(database_url, poolclass=NullPool)
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    state = {"tables_ready": False}

    async def override_get_db():
        if not state["tables_ready"]:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            state["tables_ready"] = True
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    manager.active_connections.clear()


# ── Shared payloads ──

CORRECT_CODE = (
    "function calculateTotal(items) {\n"
    "  let total = 0;\n"
    "  for (let i=0; i<items.length; i++) {\n"
    "    total += items[i].price;\n"
    "  }\n"
    "  return total;\n"
    "}"
)

BUGGY_CODE = (
    "function calculateTotal(items) {\n"
    "  let total = 0\n"
    "  for (let i=0; i<items.length; i++) {\n"
    "    total += items[i].price\n"
    "  }\n"
    "}"
)


@pytest.fixture
def correct_code() -> str:
    return CORRECT_CODE


@pytest.fixture
def buggy_code() -> str:
    return BUGGY_CODE


@pytest.fixture
def code_content() -> dict:
    return {
        "code": BUGGY_CODE,
        "errors": ["Missing semicolons", "Missing return statement"],
        "correctCode": CORRECT_CODE,
    }
