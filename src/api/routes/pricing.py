"""
Pricing endpoints
=================

POST /api/v1/pricing/quote                   -- availability + price for a trip
POST /api/v1/pricing/preview                 -- price an arbitrary configuration
GET  /api/v1/pricing/settings/{service_type} -- current (or default) settings
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_resolver
from src.api.middleware import current_rate_limit, limiter
from src.api.schemas import (
    PreviewRequest,
    PriceResponse,
    PricingSettingsResponse,
    QuoteRequest,
    QuoteResponse,
)
from src.domain.availability import AvailabilityResolver
from src.domain.currency import format_minor_units
from src.domain.entities import PriceQuote, PricingSettings
from src.domain.enums import ServiceType
from src.domain.pricing import default_pricing_settings, quote
from src.infrastructure.repositories import PricingSettingsRepository

router = APIRouter(prefix="/pricing", tags=["pricing"])


def _price_fields(q: PriceQuote) -> dict:
    return {
        "base": q.base,
        "fee": q.fee,
        "surge_multiplier": q.surge_multiplier,
        "price": q.total,
        "price_cents": q.total_cents,
        "price_display": format_minor_units(q.total_cents),
    }


def settings_response(
    current: PricingSettings, is_default: bool = False
) -> PricingSettingsResponse:
    return PricingSettingsResponse(
        id=current.id,
        service_type=current.service_type,
        price_per_km_active=current.price_per_km_active,
        price_per_km=current.price_per_km,
        fixed_price_active=current.fixed_price_active,
        fixed_price=current.fixed_price,
        service_fee_type=current.service_fee_type,
        service_fee_value=current.service_fee_value,
        updated_by=current.updated_by,
        is_default=is_default,
    )


@router.post(
    "/quote",
    response_model=QuoteResponse,
    summary="Quote a trip",
    description=(
        "Resolves availability first, then prices the trip with the "
        "resolved surge multiplier.  Returns 409 when the service is not "
        "offered for the region and moment."
    ),
    responses={409: {"description": "Service unavailable"}},
)
@limiter.limit(current_rate_limit)
async def quote_trip(
    request: Request,
    body: QuoteRequest,
    db: AsyncSession = Depends(get_db),
    resolver: AvailabilityResolver = Depends(get_resolver),
):
    availability = await resolver.resolve(body.service_type, body.region, body.at)
    if not availability.available:
        raise HTTPException(status_code=409, detail=availability.reason.value)

    current = await PricingSettingsRepository(db).get_current(body.service_type)
    if current is None:
        current = default_pricing_settings(body.service_type)

    q = quote(current, body.distance_km, availability.surge_multiplier or 1.0)
    return QuoteResponse(
        service_type=body.service_type,
        region=body.region,
        distance_km=body.distance_km,
        **_price_fields(q),
    )


@router.post(
    "/preview",
    response_model=PriceResponse,
    summary="Preview a price for an unsaved configuration",
)
@limiter.limit(current_rate_limit)
async def preview_price(request: Request, body: PreviewRequest):
    q = quote(body.settings.to_entity(), body.distance_km, body.surge_multiplier)
    return PriceResponse(**_price_fields(q))


@router.get(
    "/settings/{service_type}",
    response_model=PricingSettingsResponse,
    summary="Current pricing settings for a service type",
)
@limiter.limit(current_rate_limit)
async def get_pricing_settings(
    request: Request,
    service_type: ServiceType,
    db: AsyncSession = Depends(get_db),
):
    current = await PricingSettingsRepository(db).get_current(service_type)
    if current is None:
        return settings_response(default_pricing_settings(service_type), True)
    return settings_response(current)
