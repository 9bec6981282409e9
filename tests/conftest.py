"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production models are portable (JSON
weekday masks, VARCHAR-backed enums), so the real metadata is created
directly.  Redis publishing is replaced by an ``AsyncMock``.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator, AsyncIterator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.domain.entities import AvailabilityRule
from src.domain.enums import ServiceType
from src.infrastructure import models  # noqa: F401  (registers tables)
from src.infrastructure.database import Base


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@asynccontextmanager
async def sqlite_database() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Fresh in-memory database bound to the running event loop."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


REGION = "juiz_de_fora"

# Fixed moments (2026-10-12 is a Monday)
MONDAY_NOON = datetime(2026, 10, 12, 12, 0)
FRIDAY_EVENING = datetime(2026, 10, 16, 18, 30)
SUNDAY_NOON = datetime(2026, 10, 18, 12, 0)


def make_rule(**overrides) -> AvailabilityRule:
    fields = dict(
        service_type=ServiceType.MOTO_TAXI,
        region=REGION,
        weekday_mask=(1, 2, 3, 4, 5),
        time_start="08:00",
        time_end="18:00",
        active=True,
        surge_multiplier=1.0,
    )
    fields.update(overrides)
    return AvailabilityRule(**fields)


class FakeRuleSource:
    """In-memory ``RuleSource`` that records every fetch."""

    def __init__(self, rules=(), error: Exception | None = None):
        self.rules = list(rules)
        self.error = error
        self.calls: list[tuple[ServiceType, str]] = []

    async def get_active_rules(self, service_type, region):
        self.calls.append((service_type, region))
        if self.error:
            raise self.error
        return [
            r
            for r in self.rules
            if r.service_type == service_type and r.region == region and r.active
        ]


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh schema per test; yield a session on it."""
    async with sqlite_database() as session_factory:
        async with session_factory() as session:
            yield session


@pytest.fixture
def notifier():
    fake = AsyncMock()
    fake.publish = AsyncMock(return_value=None)
    return fake


@pytest.fixture
def app_settings():
    from src.config import Settings

    return Settings(_env_file=None, rule_cache_ttl_seconds=0)


@pytest_asyncio.fixture
async def client(app_settings, notifier) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by SQLite; rate limiting off, Redis mocked."""
    from src.api.app import create_app
    from src.api.dependencies import get_db, get_notifier
    from src.api.middleware import limiter

    async with sqlite_database() as session_factory:

        async def _test_db():
            async with session_factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

        app = create_app(app_settings)
        app.dependency_overrides[get_db] = _test_db
        app.dependency_overrides[get_notifier] = lambda: notifier

        limiter.enabled = False
        transport = ASGITransport(app=app)
        try:
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            limiter.enabled = True
