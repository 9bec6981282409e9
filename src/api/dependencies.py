"""FastAPI dependency injection helpers."""

from typing import Callable

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import FeatureFlags
from src.domain.availability import AvailabilityResolver
from src.infrastructure.database import async_session_factory
from src.infrastructure.redis_client import get_redis
from src.infrastructure.repositories import AvailabilityRuleRepository
from src.infrastructure.rule_cache import CachedRuleSource, RuleChangeNotifier


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_features(request: Request) -> FeatureFlags:
    return request.app.state.features


def require_feature(name: str) -> Callable[[Request], None]:
    """Hide an endpoint (404) while feature flag *name* is off."""

    def _check(request: Request) -> None:
        if not getattr(get_features(request), name):
            raise HTTPException(status_code=404, detail="Not found")

    return _check


async def get_resolver(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResolver:
    source = AvailabilityRuleRepository(db)
    cache = request.app.state.rule_cache
    if cache is not None:
        source = CachedRuleSource(source, cache)
    return AvailabilityResolver(
        source,
        enabled_services=get_features(request).enabled_services(),
        tz=request.app.state.tz,
    )


async def get_notifier(request: Request) -> RuleChangeNotifier:
    return RuleChangeNotifier(await get_redis(), request.app.state.rule_channel)
