"""
Rule Invalidation Worker
========================

Subscribes to the Redis rule-change channel and drops the matching
entries from the in-process ``RuleCache``.

Only started when ``RULE_CACHE_TTL_SECONDS > 0``; without a cache there is
nothing to invalidate.  A lost connection is logged and retried after
``RETRY_DELAY_SECONDS``; entries still expire on their TTL meanwhile.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from src.config import settings
from src.infrastructure.redis_client import get_redis
from src.infrastructure.rule_cache import RuleCache, decode_change

logger = logging.getLogger(__name__)

RETRY_DELAY_SECONDS = 5

_task: asyncio.Task | None = None
_stop_event: asyncio.Event | None = None


# ── Public API ────────────────────────────────────────────────────────


async def start_invalidation_listener(
    cache: RuleCache, channel: Optional[str] = None
) -> None:
    global _task, _stop_event
    channel = channel or settings.rule_invalidation_channel
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop(cache, channel))
    logger.info("Rule invalidation listener started (channel=%s)", channel)


async def stop_invalidation_listener() -> None:
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    logger.info("Rule invalidation listener stopped")


def handle_message(cache: RuleCache, message: Optional[dict[str, Any]]) -> int:
    """Apply one pub/sub message to *cache*; returns entries dropped."""
    if not message or message.get("type") != "message":
        return 0
    service_type, region = decode_change(message.get("data") or "")
    return cache.invalidate(service_type, region)


# ── Internals ─────────────────────────────────────────────────────────


async def _loop(cache: RuleCache, channel: str) -> None:
    assert _stop_event is not None
    while not _stop_event.is_set():
        try:
            await _listen(cache, channel)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Rule invalidation listener failed; retrying")
            # drop everything: changes may have been missed while disconnected
            cache.invalidate()
        try:
            await asyncio.wait_for(_stop_event.wait(), timeout=RETRY_DELAY_SECONDS)
            break
        except asyncio.TimeoutError:
            pass


async def _listen(cache: RuleCache, channel: str) -> None:
    assert _stop_event is not None
    redis = await get_redis()
    pubsub = redis.pubsub()
    await pubsub.subscribe(channel)
    try:
        while not _stop_event.is_set():
            message = await pubsub.get_message(
                ignore_subscribe_messages=True, timeout=1.0
            )
            handle_message(cache, message)
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.aclose()
