"""
FastAPI application factory.

* Registers routes for availability, pricing and admin.
* Injects the feature flags and timezone into ``app.state``.
* Starts / stops the rule invalidation listener via lifespan events
  when the rule cache is enabled.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import configure_limiter, limiter
from src.api.routes import admin, availability, pricing
from src.config import Settings, settings as default_settings
from src.domain.entities import InvalidPricingInput
from src.infrastructure.rule_cache import RuleCache
from src.workers import rule_invalidation as _invalidation


async def _invalid_pricing_input_handler(request: Request, exc: InvalidPricingInput):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or default_settings
    logging.basicConfig(level=config.log_level)

    cache = (
        RuleCache(config.rule_cache_ttl_seconds)
        if config.rule_cache_ttl_seconds > 0
        else None
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Listen for rule changes while the cache is on."""
        if cache is not None:
            await _invalidation.start_invalidation_listener(
                cache, config.rule_invalidation_channel
            )
        yield
        if cache is not None:
            await _invalidation.stop_invalidation_listener()

    app = FastAPI(
        title="Ride Fare API",
        description=(
            "Decides whether a ride or delivery service is offered in a "
            "region at a given moment, with which surge multiplier, and "
            "what the trip costs."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.features = config.features
    app.state.tz = ZoneInfo(config.timezone)
    app.state.rule_cache = cache
    app.state.rule_channel = config.rule_invalidation_channel

    # Rate limiter
    configure_limiter(config)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(InvalidPricingInput, _invalid_pricing_input_handler)

    # Routers
    app.include_router(availability.router, prefix="/api/v1")
    app.include_router(pricing.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
