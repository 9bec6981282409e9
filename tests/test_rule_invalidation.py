"""
Rule invalidation listener tests.

Redis is replaced by mocks: ``get_redis`` returns a client whose
``pubsub()`` hands out an ``AsyncMock`` subscription.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.api.app import create_app
from src.config import Settings
from src.domain.enums import ServiceType
from src.infrastructure.rule_cache import RuleCache, encode_change
from src.workers import rule_invalidation
from tests.conftest import REGION

CHANNEL = "rules_test"


def _fake_redis(messages=(), subscribe_error: Exception | None = None):
    """Redis mock whose pub/sub yields *messages*, then stays idle."""
    pending = list(messages)

    async def get_message(ignore_subscribe_messages=False, timeout=None):
        await asyncio.sleep(0.01)
        return pending.pop(0) if pending else None

    pubsub = AsyncMock()
    pubsub.get_message = AsyncMock(side_effect=get_message)
    if subscribe_error is not None:
        pubsub.subscribe = AsyncMock(side_effect=subscribe_error)

    client = MagicMock()
    client.pubsub = MagicMock(return_value=pubsub)
    return client, pubsub


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        assert loop.time() < deadline, "condition not reached in time"
        await asyncio.sleep(0.01)


def _filled_cache() -> RuleCache:
    cache = RuleCache(ttl_seconds=60)
    cache.set((ServiceType.MOTO_TAXI, REGION), [])
    cache.set((ServiceType.DELIVERY_CAR, REGION), [])
    return cache


class TestListener:
    @pytest.mark.asyncio
    async def test_message_drops_matching_key(self):
        cache = _filled_cache()
        message = {
            "type": "message",
            "data": encode_change(ServiceType.MOTO_TAXI, REGION),
        }
        client, pubsub = _fake_redis([message])

        with patch.object(
            rule_invalidation, "get_redis", AsyncMock(return_value=client)
        ):
            await rule_invalidation.start_invalidation_listener(cache, CHANNEL)
            try:
                await _wait_until(lambda: len(cache) == 1)
            finally:
                await rule_invalidation.stop_invalidation_listener()

        pubsub.subscribe.assert_awaited_once_with(CHANNEL)
        assert cache.get((ServiceType.MOTO_TAXI, REGION)) is None
        assert cache.get((ServiceType.DELIVERY_CAR, REGION)) is not None

    @pytest.mark.asyncio
    async def test_connection_loss_invalidates_everything(self):
        cache = _filled_cache()
        client, _ = _fake_redis(subscribe_error=RedisConnectionError("down"))

        with patch.object(
            rule_invalidation, "get_redis", AsyncMock(return_value=client)
        ):
            await rule_invalidation.start_invalidation_listener(cache, CHANNEL)
            try:
                await _wait_until(lambda: len(cache) == 0)
            finally:
                await rule_invalidation.stop_invalidation_listener()

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_stop_closes_the_subscription(self):
        client, pubsub = _fake_redis()

        with patch.object(
            rule_invalidation, "get_redis", AsyncMock(return_value=client)
        ):
            await rule_invalidation.start_invalidation_listener(
                RuleCache(ttl_seconds=60), CHANNEL
            )
            await _wait_until(lambda: pubsub.get_message.await_count > 0)
            await rule_invalidation.stop_invalidation_listener()

        pubsub.unsubscribe.assert_awaited_once_with(CHANNEL)
        pubsub.aclose.assert_awaited_once()


class TestLifespan:
    @pytest.mark.asyncio
    async def test_listener_runs_while_cache_is_enabled(self):
        app = create_app(
            Settings(
                _env_file=None,
                rule_cache_ttl_seconds=30,
                rule_invalidation_channel=CHANNEL,
            )
        )
        start, stop = AsyncMock(), AsyncMock()

        with patch.object(rule_invalidation, "start_invalidation_listener", start), \
                patch.object(rule_invalidation, "stop_invalidation_listener", stop):
            async with app.router.lifespan_context(app):
                start.assert_awaited_once_with(app.state.rule_cache, CHANNEL)
                stop.assert_not_awaited()
            stop.assert_awaited_once()

        assert isinstance(app.state.rule_cache, RuleCache)
        assert app.state.rule_cache.ttl == 30

    @pytest.mark.asyncio
    async def test_no_listener_without_cache(self):
        app = create_app(Settings(_env_file=None, rule_cache_ttl_seconds=0))
        start, stop = AsyncMock(), AsyncMock()

        with patch.object(rule_invalidation, "start_invalidation_listener", start), \
                patch.object(rule_invalidation, "stop_invalidation_listener", stop):
            async with app.router.lifespan_context(app):
                pass

        assert app.state.rule_cache is None
        start.assert_not_awaited()
        stop.assert_not_awaited()
