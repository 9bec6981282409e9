"""
Short-lived availability-rule cache with explicit invalidation.

Off by default (``RULE_CACHE_TTL_SECONDS=0``): the resolver then re-fetches
on every call.  When on, entries expire after the TTL or as soon as a
rule-change message arrives on the Redis channel (see
``src.workers.rule_invalidation``).

Failed fetches are never cached, so the resolver still fails closed on
the next call instead of serving a stale empty set.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Callable, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.domain.availability import RuleSource
from src.domain.entities import AvailabilityRule
from src.domain.enums import ServiceType

logger = logging.getLogger(__name__)

CacheKey = tuple[ServiceType, str]
Generation = tuple[int, int, int, int]


class RuleCache:
    """TTL cache of rule sets keyed by ``(service_type, region)``.

    Every invalidation bumps a generation counter for the scope it names.
    Fetches started before the bump must not write back their snapshot;
    ``CachedRuleSource`` reads ``generation(key)`` before fetching and
    passes it to ``set``.
    """

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ):
        self.ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, list[AvailabilityRule]]] = {}
        self._epoch = 0
        self._by_type: dict[ServiceType, int] = {}
        self._by_region: dict[str, int] = {}
        self._by_key: dict[CacheKey, int] = {}

    def generation(self, key: CacheKey) -> Generation:
        service_type, region = key
        return (
            self._epoch,
            self._by_type.get(service_type, 0),
            self._by_region.get(region, 0),
            self._by_key.get(key, 0),
        )

    def get(self, key: CacheKey) -> Optional[list[AvailabilityRule]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, rules = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return rules

    def set(
        self,
        key: CacheKey,
        rules: list[AvailabilityRule],
        generation: Optional[Generation] = None,
    ) -> bool:
        """Store *rules*; refused when *key* was invalidated since *generation*."""
        if generation is not None and generation != self.generation(key):
            logger.debug("Discarding stale rule set for %s/%s", *key)
            return False
        self._entries[key] = (self._clock() + self.ttl, list(rules))
        return True

    def invalidate(
        self,
        service_type: Optional[ServiceType] = None,
        region: Optional[str] = None,
    ) -> int:
        """Drop entries matching the given filters (none = everything)."""
        if service_type is not None and region is not None:
            key = (service_type, region)
            self._by_key[key] = self._by_key.get(key, 0) + 1
        elif service_type is not None:
            self._by_type[service_type] = self._by_type.get(service_type, 0) + 1
        elif region is not None:
            self._by_region[region] = self._by_region.get(region, 0) + 1
        else:
            self._epoch += 1

        doomed = [
            key
            for key in self._entries
            if (service_type is None or key[0] == service_type)
            and (region is None or key[1] == region)
        ]
        for key in doomed:
            del self._entries[key]
        logger.debug("Invalidated %d cached rule set(s)", len(doomed))
        return len(doomed)

    def __len__(self) -> int:
        return len(self._entries)


class CachedRuleSource:
    """Read-through ``RuleSource`` wrapper."""

    def __init__(self, source: RuleSource, cache: RuleCache):
        self.source = source
        self.cache = cache

    async def get_active_rules(
        self, service_type: ServiceType, region: str
    ) -> list[AvailabilityRule]:
        key = (service_type, region)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        generation = self.cache.generation(key)
        rules = await self.source.get_active_rules(service_type, region)
        self.cache.set(key, rules, generation)
        return rules


# ── Change notifications ──────────────────────────────────────────────


def encode_change(service_type: Optional[ServiceType], region: Optional[str]) -> str:
    return json.dumps(
        {
            "service_type": service_type.value if service_type else None,
            "region": region,
        }
    )


def decode_change(payload: str) -> tuple[Optional[ServiceType], Optional[str]]:
    """Parse a change message; malformed payloads mean "invalidate all"."""
    try:
        data = json.loads(payload)
        raw_type = data.get("service_type")
        return (ServiceType(raw_type) if raw_type else None, data.get("region"))
    except (ValueError, TypeError, AttributeError):
        logger.warning("Malformed rule-change payload: %r", payload)
        return None, None


class RuleChangeNotifier:
    """Publishes rule changes so every API process can drop stale entries."""

    def __init__(self, client: aioredis.Redis, channel: str):
        self.redis = client
        self.channel = channel

    async def publish(
        self, service_type: Optional[ServiceType], region: Optional[str]
    ) -> None:
        try:
            await self.redis.publish(self.channel, encode_change(service_type, region))
        except RedisError:
            # the change is committed; other processes catch up on TTL expiry
            logger.warning("Could not publish rule change on %s", self.channel)
