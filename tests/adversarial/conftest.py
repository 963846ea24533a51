"""
Shared fixtures for adversarial tests.

Provides the waitlist wired over each store backend, so the same
attacks run against the in-memory store and PostgreSQL.
"""

from collections.abc import Generator
from unittest.mock import Mock

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryRecordStore, InMemoryUserDirectory
from src.adapters.repository.postgres import (
    PostgresRecordStore,
    PostgresUserDirectory,
    run_migrations,
)
from src.api.dependencies import WaitlistComponents, build_components
from src.config.settings import get_settings
from src.domain.options import WaitlistOptions
from src.domain.ports import RecordStore, UserDirectory

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture(scope="module")
def pool() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture(params=["memory", pytest.param("postgres", marks=pytest.mark.integration)])
def backend(request: pytest.FixtureRequest) -> tuple[RecordStore, UserDirectory]:
    """Store and user directory for each backend; postgres tables are emptied first."""
    if request.param == "memory":
        return InMemoryRecordStore(), InMemoryUserDirectory()

    pool: ConnectionPool = request.getfixturevalue("pool")
    with pool.connection() as conn:
        conn.execute("DELETE FROM waitlist")
        conn.execute("DELETE FROM users")
        conn.commit()
    return PostgresRecordStore(pool), PostgresUserDirectory(pool)


@pytest.fixture
def make_components(backend):
    """Wire the domain over the current backend with the given options."""
    store, users = backend

    def factory(**option_overrides) -> WaitlistComponents:
        return build_components(WaitlistOptions(**option_overrides), store, users, Mock())

    return factory


@pytest.fixture
def components(make_components) -> WaitlistComponents:
    return make_components()
