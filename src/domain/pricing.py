"""
Price Calculator  (Strategy Pattern)
====================================

Formula
-------
Price = max(0, round_half_up((Base + Service_Fee) x Surge_Multiplier))

* **Base** is chosen by a strategy:
  - ``FixedPriceStrategy`` when ``fixed_price_active`` and a fixed price
    is configured (distance is ignored entirely);
  - ``PerKmStrategy`` otherwise: distance x price_per_km (0 if inactive).
* **Service_Fee** is added after the strategy decision: a fixed amount,
  or a percentage of the base.
* **round_half_up** rounds on the cent boundary (half away from zero for
  non-negative amounts).

Complexity: O(1) per price calculation.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from .entities import InvalidPricingInput, PriceQuote, PricingSettings
from .enums import ServiceFeeType, ServiceType


# ── Strategy hierarchy ────────────────────────────────────────────────


class PricingStrategy(ABC):
    @abstractmethod
    def base_amount(self, settings: PricingSettings, distance_km: float) -> float: ...


class FixedPriceStrategy(PricingStrategy):
    def base_amount(self, settings: PricingSettings, distance_km: float) -> float:
        return float(settings.fixed_price)


class PerKmStrategy(PricingStrategy):
    def base_amount(self, settings: PricingSettings, distance_km: float) -> float:
        rate = settings.price_per_km if settings.price_per_km_active else 0.0
        return distance_km * rate


def select_strategy(settings: PricingSettings) -> PricingStrategy:
    if settings.fixed_price_active and settings.fixed_price is not None:
        return FixedPriceStrategy()
    return PerKmStrategy()


# ── Helpers ───────────────────────────────────────────────────────────


def default_pricing_settings(
    service_type: ServiceType = ServiceType.MOTO_TAXI,
) -> PricingSettings:
    """Configuration used when none has been saved for *service_type*."""
    return PricingSettings(
        service_type=service_type,
        price_per_km_active=True,
        price_per_km=2.5,
        fixed_price_active=False,
        fixed_price=None,
        service_fee_type=ServiceFeeType.FIXED,
        service_fee_value=0.0,
    )


def service_fee(base: float, settings: PricingSettings) -> float:
    if settings.service_fee_type == ServiceFeeType.FIXED:
        return settings.service_fee_value
    return base * (settings.service_fee_value / 100)


def apply_service_fee(base: float, settings: PricingSettings) -> float:
    return base + service_fee(base, settings)


def round_half_up(amount: float) -> float:
    return math.floor(amount * 100 + 0.5) / 100


def _check_non_negative(name: str, value: float) -> None:
    if not math.isfinite(value) or value < 0:
        raise InvalidPricingInput(f"{name} must be a finite, non-negative number")


# ── Public API ────────────────────────────────────────────────────────


def quote(
    settings: PricingSettings,
    distance_km: float,
    surge_multiplier: float = 1.0,
) -> PriceQuote:
    _check_non_negative("distance_km", distance_km)
    _check_non_negative("surge_multiplier", surge_multiplier)

    base = select_strategy(settings).base_amount(settings, distance_km)
    fee = service_fee(base, settings)
    total = max(0.0, round_half_up((base + fee) * surge_multiplier))
    return PriceQuote(
        base=base, fee=fee, surge_multiplier=surge_multiplier, total=total
    )


def compute_price(
    settings: PricingSettings,
    distance_km: float,
    surge_multiplier: float = 1.0,
) -> float:
    """Final price in currency units, never negative, at most 2 decimals."""
    return quote(settings, distance_km, surge_multiplier).total


def format_eta(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}min" if mins else f"{hours}h"
