"""
Integration test configuration with testcontainers.

Provides a session-scoped PostgreSQL 16 container for the complaint
repository tests. The complaints table is created if missing
and truncated after each test, so every test starts from an empty store.

Usage:
    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_example(postgres_repository: PostgresComplaintRepository) -> None:
        ...

Note: Docker must be running; without it the PostgreSQL tests are skipped.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from docker.errors import DockerException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from testcontainers.postgres import PostgresContainer

from civicledger.infrastructure.adapters.persistence.complaint_repository import (
    PostgresComplaintRepository,
)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container."""
    container = PostgresContainer("postgres:16-alpine")
    try:
        container.start()
    except DockerException as e:
        pytest.skip(f"Docker is not available: {e}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Container URL rewritten for the asyncpg driver."""
    sync_url = postgres_container.get_connection_url()
    return sync_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://").replace(
        "postgresql://", "postgresql+asyncpg://"
    )


@pytest.fixture
async def postgres_repository(
    postgres_async_url: str,
) -> AsyncGenerator[PostgresComplaintRepository, None]:
    """Repository on a fresh complaints table."""
    engine = create_async_engine(postgres_async_url, echo=False)
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    repository = PostgresComplaintRepository(session_factory)
    await repository.ensure_schema()

    yield repository

    async with session_factory() as session, session.begin():
        await session.execute(text("TRUNCATE complaints"))
    await engine.dispose()
