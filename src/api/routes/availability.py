"""
Availability endpoints
======================

GET /api/v1/availability?region=...                -- services offered now
GET /api/v1/availability/{service_type}?region=... -- one service's status
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from src.api.dependencies import get_resolver
from src.api.middleware import current_rate_limit, limiter
from src.api.schemas import AvailabilityResponse, ServiceOfferResponse
from src.domain.availability import AvailabilityResolver
from src.domain.enums import ServiceType

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get(
    "",
    response_model=list[ServiceOfferResponse],
    summary="List the services offered in a region",
)
@limiter.limit(current_rate_limit)
async def list_available_services(
    request: Request,
    region: str = Query(..., min_length=1),
    at: Optional[datetime] = Query(None, description="Defaults to now"),
    resolver: AvailabilityResolver = Depends(get_resolver),
):
    offers = await resolver.available_services(region, at)
    return [
        ServiceOfferResponse(
            service_type=o.service_type,
            label=o.service_type.label,
            surge_multiplier=o.surge_multiplier,
        )
        for o in offers
    ]


@router.get(
    "/{service_type}",
    response_model=AvailabilityResponse,
    summary="Check whether a service is offered in a region",
)
@limiter.limit(current_rate_limit)
async def check_availability(
    request: Request,
    service_type: ServiceType,
    region: str = Query(..., min_length=1),
    at: Optional[datetime] = Query(None, description="Defaults to now"),
    resolver: AvailabilityResolver = Depends(get_resolver),
):
    result = await resolver.resolve(service_type, region, at)
    return AvailabilityResponse(
        service_type=service_type,
        region=region,
        available=result.available,
        reason=result.reason.value if result.reason else None,
        surge_multiplier=result.surge_multiplier,
    )
