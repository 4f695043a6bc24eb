"""Pytest configuration and shared fixtures.

This module provides centralized test fixtures for:
- A file-backed SQLite data source seeded with sample users
- FieldProjector instances bound to that data source
- HTTP client for API testing
"""

import os

# Must be set before app.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.main import app
from app.projections.schema import Relation, Schema
from app.routes.projection import get_projector
from app.services.field_projector import FieldProjector

USERS_SCHEMA = "id:int,name:string,email:string,age:int"

SAMPLE_USERS = [
    {"id": 1, "name": "Alice", "email": "alice@example.com", "age": 30},
    {"id": 2, "name": "Bob", "email": "bob@example.com", "age": 25},
]


# =============================================================================
# Data Source Fixtures
# =============================================================================


@pytest.fixture
def relation() -> Relation:
    """The ``users`` relation with id, name, email and age columns."""
    return Relation("users", Schema.parse(USERS_SCHEMA))


@pytest_asyncio.fixture
async def test_engine(relation, tmp_path):
    """SQLite engine with the users table created and seeded.

    A file database lets concurrent sessions use separate connections.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'projector.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(relation.table.metadata.create_all)
        await conn.execute(relation.table.insert(), SAMPLE_USERS)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def projector(relation, session_maker) -> FieldProjector:
    """FieldProjector over the seeded users table."""
    return FieldProjector(relation, session_maker)


# =============================================================================
# HTTP Client Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def client(projector):
    """Async test client for the FastAPI app backed by the test projector."""
    app.dependency_overrides[get_projector] = lambda: projector

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.pop(get_projector, None)
