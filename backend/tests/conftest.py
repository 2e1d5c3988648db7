"""Root conftest — shared test configuration and fixtures.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - db_manager is swapped for the test manager while the GraphQL client is open
    - Cascade retry delays shrunk so resume tests don't sleep

Design Decisions:
    - File-backed SQLite, not :memory:. Strawberry resolves sibling fields
      concurrently, each session needs its own connection
    - Environment set before any classroom import so get_settings() sees it
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("CASCADE_BASE_DELAY_MS", "1")
os.environ.setdefault("CASCADE_MAX_DELAY_MS", "5")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

import classroom.infrastructure.database as db_module  # noqa: E402
from classroom.infrastructure.database import DatabaseSessionManager  # noqa: E402
from classroom.infrastructure.document_store import DocumentStore  # noqa: E402
from classroom.main import app  # noqa: E402
from classroom.services.queries import EntityQueries  # noqa: E402
from classroom.services.relationships import RelationshipService  # noqa: E402


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'classroom.db'}", echo=False,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def manager(test_engine):
    manager = DatabaseSessionManager.from_engine(test_engine)
    await manager.create_all()
    return manager


@pytest.fixture
def store(manager):
    return DocumentStore(manager)


@pytest.fixture
def service(store):
    return RelationshipService(store)


@pytest.fixture
def queries(store):
    return EntityQueries(store)


@pytest.fixture
async def client(manager):
    """GraphQL/REST test client bound to the per-test database."""
    original_manager = db_module.db_manager
    db_module.db_manager = manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    db_module.db_manager = original_manager


@pytest.fixture
def gql(client):
    """POST a GraphQL operation and return the decoded JSON body."""
    async def _run(query: str, **variables):
        res = await client.post(
            "/graphql", json={"query": query, "variables": variables},
        )
        assert res.status_code == 200, res.text
        return res.json()
    return _run
