"""
Availability Resolver
=====================

Decides whether a service type is offered in a region at a given moment,
and at which surge multiplier.

Algorithm
---------
1. Fetch the active rules for the exact (service_type, region) pair.
   No rules -- or a failed fetch -- means ``UNAVAILABLE_REGION``.
   The engine fails closed: a service whose rules cannot be confirmed is
   not offered.
2. Map the moment to an ISO weekday (1 = Monday .. 7 = Sunday) and a
   zero-padded ``"HH:MM"`` string.
3. A rule matches when its weekday mask contains the weekday and
   ``time_start <= HH:MM <= time_end`` (string comparison, both ends
   inclusive).
4. No match -> ``OUT_OF_SCHEDULE``.  Otherwise the result is available
   with the **maximum** surge among matching rules; overlapping rules
   never average or stack.

Complexity: O(R) per call, R = rules for the pair.  Every call performs
its own fetch; there is no de-duplication between concurrent callers.
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Iterable, Optional, Protocol

from .entities import AvailabilityResult, AvailabilityRule, ServiceOffer
from .enums import ServiceType, UnavailableReason

logger = logging.getLogger(__name__)


class RuleSource(Protocol):
    async def get_active_rules(
        self, service_type: ServiceType, region: str
    ) -> list[AvailabilityRule]: ...


# ── Pure helpers ──────────────────────────────────────────────────────


def iso_weekday(moment: datetime) -> int:
    """1 = Monday .. 7 = Sunday."""
    return moment.isoweekday()


def format_hhmm(moment: datetime) -> str:
    return f"{moment.hour:02d}:{moment.minute:02d}"


def evaluate_rules(
    rules: Iterable[AvailabilityRule], moment: datetime
) -> AvailabilityResult:
    """Pure decision over an already-fetched rule set."""
    rules = list(rules)
    if not rules:
        return AvailabilityResult.unavailable(UnavailableReason.REGION_UNAVAILABLE)

    weekday = iso_weekday(moment)
    hhmm = format_hhmm(moment)

    surges = [r.effective_surge for r in rules if r.matches(weekday, hhmm)]
    if not surges:
        return AvailabilityResult.unavailable(UnavailableReason.OUT_OF_SCHEDULE)

    return AvailabilityResult.offered(max(surges))


# ── Resolver ──────────────────────────────────────────────────────────


class AvailabilityResolver:
    """High-level API used by the quote flow and the availability routes."""

    def __init__(
        self,
        rule_source: RuleSource,
        enabled_services: Optional[Iterable[ServiceType]] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.rule_source = rule_source
        self.enabled_services = (
            frozenset(enabled_services) if enabled_services is not None else None
        )
        self.tz = tz

    def _localize(self, moment: Optional[datetime]) -> datetime:
        if moment is None:
            return datetime.now(self.tz)
        if moment.tzinfo is not None and self.tz is not None:
            return moment.astimezone(self.tz)
        return moment

    async def resolve(
        self,
        service_type: ServiceType,
        region: str,
        moment: Optional[datetime] = None,
    ) -> AvailabilityResult:
        if (
            self.enabled_services is not None
            and service_type not in self.enabled_services
        ):
            return AvailabilityResult.unavailable(UnavailableReason.SERVICE_DISABLED)

        moment = self._localize(moment)
        try:
            rules = await self.rule_source.get_active_rules(service_type, region)
        except Exception:
            logger.exception(
                "Failed to fetch availability rules for %s/%s",
                service_type.value,
                region,
            )
            return AvailabilityResult.unavailable(UnavailableReason.REGION_UNAVAILABLE)

        return evaluate_rules(rules, moment)

    async def available_services(
        self, region: str, moment: Optional[datetime] = None
    ) -> list[ServiceOffer]:
        """Resolve every known service type; keep only the offered ones."""
        moment = self._localize(moment)
        offers: list[ServiceOffer] = []
        for service_type in ServiceType:
            result = await self.resolve(service_type, region, moment)
            if result.available:
                offers.append(
                    ServiceOffer(service_type, result.surge_multiplier or 1.0)
                )
        return offers
