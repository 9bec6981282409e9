"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from src.domain.entities import PricingSettings
from src.domain.enums import ServiceFeeType, ServiceType

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ── Requests ──────────────────────────────────────────────────────────


class PricingSettingsBody(BaseModel):
    service_type: ServiceType = ServiceType.MOTO_TAXI
    price_per_km_active: bool = True
    price_per_km: float = Field(2.5, ge=0)
    fixed_price_active: bool = False
    fixed_price: Optional[float] = Field(None, ge=0)
    service_fee_type: ServiceFeeType = ServiceFeeType.FIXED
    service_fee_value: float = 0.0

    def to_entity(self) -> PricingSettings:
        return PricingSettings(**self.model_dump())


class PricingSettingsPatch(BaseModel):
    price_per_km_active: Optional[bool] = None
    price_per_km: Optional[float] = Field(None, ge=0)
    fixed_price_active: Optional[bool] = None
    fixed_price: Optional[float] = Field(None, ge=0)
    service_fee_type: Optional[ServiceFeeType] = None
    service_fee_value: Optional[float] = None
    updated_by: Optional[str] = Field(None, max_length=64)

    @field_validator(
        "price_per_km_active",
        "price_per_km",
        "fixed_price_active",
        "service_fee_type",
        "service_fee_value",
    )
    @classmethod
    def _not_null(cls, value):
        # only fixed_price is nullable; the rest may be omitted, not cleared
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class QuoteRequest(BaseModel):
    service_type: ServiceType
    region: str = Field(..., min_length=1, max_length=120)
    distance_km: float = Field(..., ge=0)
    at: Optional[datetime] = Field(
        None, description="Moment to price for; defaults to now (local time)."
    )


class PreviewRequest(BaseModel):
    settings: PricingSettingsBody
    distance_km: float = Field(..., ge=0)
    surge_multiplier: float = Field(1.0, ge=0)


class AvailabilityRuleBody(BaseModel):
    service_type: ServiceType
    region: str = Field(..., min_length=1, max_length=120)
    weekday_mask: list[int] = Field(..., description="1 = Monday .. 7 = Sunday")
    time_start: str
    time_end: str
    active: bool = True
    surge_multiplier: float = Field(1.0, ge=1.0)
    notes: Optional[str] = None

    @field_validator("weekday_mask")
    @classmethod
    def _weekdays(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("select at least one weekday")
        if any(day < 1 or day > 7 for day in value):
            raise ValueError("weekdays must be between 1 (Mon) and 7 (Sun)")
        return sorted(set(value))

    @field_validator("time_start", "time_end")
    @classmethod
    def _hhmm(cls, value: str) -> str:
        if not _HHMM.match(value):
            raise ValueError("time must be formatted as HH:MM")
        return value

    @model_validator(mode="after")
    def _window(self) -> AvailabilityRuleBody:
        if self.time_start >= self.time_end:
            raise ValueError("time_end must be later than time_start")
        return self


# ── Responses ─────────────────────────────────────────────────────────


class AvailabilityResponse(BaseModel):
    service_type: ServiceType
    region: str
    available: bool
    reason: Optional[str] = None
    surge_multiplier: Optional[float] = None


class ServiceOfferResponse(BaseModel):
    service_type: ServiceType
    label: str
    surge_multiplier: float


class PriceResponse(BaseModel):
    base: float
    fee: float
    surge_multiplier: float
    price: float
    price_cents: int
    price_display: str


class QuoteResponse(PriceResponse):
    service_type: ServiceType
    region: str
    distance_km: float


class PricingSettingsResponse(PricingSettingsBody):
    id: Optional[int] = None
    updated_by: Optional[str] = None
    is_default: bool = False


class AvailabilityRuleResponse(BaseModel):
    id: int
    service_type: ServiceType
    region: str
    weekday_mask: list[int]
    time_start: str
    time_end: str
    active: bool
    surge_multiplier: float
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
