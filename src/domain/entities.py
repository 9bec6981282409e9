"""
Domain entities and value objects.

* ``AvailabilityRule`` -- one weekly time window for a (service, region)
  pair.  ``matches`` encapsulates the weekday + inclusive window check.
* ``PricingSettings`` -- the current pricing configuration of a service.
* ``AvailabilityResult`` / ``ServiceOffer`` / ``PriceQuote`` -- outputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import ServiceFeeType, ServiceType, UnavailableReason


class InvalidPricingInput(ValueError):
    """Raised when a distance or surge multiplier is negative or not finite."""


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class AvailabilityRule:
    service_type: ServiceType
    region: str
    weekday_mask: tuple[int, ...] = ()
    time_start: str = "00:00"
    time_end: str = "23:59"
    active: bool = True
    surge_multiplier: Optional[float] = 1.0
    id: Optional[int] = None
    notes: Optional[str] = None

    def matches(self, weekday: int, hhmm: str) -> bool:
        """Weekday in mask and ``time_start <= hhmm <= time_end`` (string order)."""
        return weekday in self.weekday_mask and self.time_start <= hhmm <= self.time_end

    @property
    def effective_surge(self) -> float:
        # unset (None / 0) counts as no surge
        return self.surge_multiplier or 1.0


@dataclass(frozen=True)
class PricingSettings:
    service_type: ServiceType = ServiceType.MOTO_TAXI
    price_per_km_active: bool = True
    price_per_km: float = 2.5
    fixed_price_active: bool = False
    fixed_price: Optional[float] = None
    service_fee_type: ServiceFeeType = ServiceFeeType.FIXED
    service_fee_value: float = 0.0
    id: Optional[int] = None
    updated_by: Optional[str] = None


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: Optional[UnavailableReason] = None
    surge_multiplier: Optional[float] = None

    @classmethod
    def unavailable(cls, reason: UnavailableReason) -> AvailabilityResult:
        return cls(available=False, reason=reason)

    @classmethod
    def offered(cls, surge_multiplier: float) -> AvailabilityResult:
        return cls(available=True, surge_multiplier=surge_multiplier)


@dataclass(frozen=True)
class ServiceOffer:
    service_type: ServiceType
    surge_multiplier: float = 1.0


@dataclass(frozen=True)
class PriceQuote:
    base: float
    fee: float
    surge_multiplier: float
    total: float

    @property
    def total_cents(self) -> int:
        return int(round(self.total * 100))
