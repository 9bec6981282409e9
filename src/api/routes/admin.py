"""
Admin endpoints
===============

GET    /api/v1/admin/health                       -- simple health check
GET    /api/v1/admin/availability-rules           -- list every rule
POST   /api/v1/admin/availability-rules           -- create a rule
PUT    /api/v1/admin/availability-rules/{rule_id} -- replace a rule
DELETE /api/v1/admin/availability-rules/{rule_id} -- delete a rule
GET    /api/v1/admin/pricing                      -- current settings per service
PUT    /api/v1/admin/pricing/{service_type}       -- patch (or create) settings

Rule writes publish a change message so cached rule sets are dropped.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_notifier, require_feature
from src.api.middleware import current_rate_limit, limiter
from src.api.routes.pricing import settings_response
from src.api.schemas import (
    AvailabilityRuleBody,
    AvailabilityRuleResponse,
    HealthResponse,
    PricingSettingsPatch,
    PricingSettingsResponse,
)
from src.domain.enums import ServiceType
from src.infrastructure.repositories import (
    AvailabilityRuleRepository,
    PricingSettingsRepository,
)
from src.infrastructure.rule_cache import RuleChangeNotifier

router = APIRouter(prefix="/admin", tags=["admin"])

rules_enabled = Depends(require_feature("availability_rules"))
pricing_enabled = Depends(require_feature("admin_service_pricing"))


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()


# ── Availability rules ────────────────────────────────────────────────


@router.get(
    "/availability-rules",
    response_model=list[AvailabilityRuleResponse],
    dependencies=[rules_enabled],
    summary="List all availability rules",
)
@limiter.limit(current_rate_limit)
async def list_rules(request: Request, db: AsyncSession = Depends(get_db)):
    return await AvailabilityRuleRepository(db).list_all()


@router.post(
    "/availability-rules",
    status_code=201,
    response_model=AvailabilityRuleResponse,
    dependencies=[rules_enabled],
    summary="Create an availability rule",
)
@limiter.limit(current_rate_limit)
async def create_rule(
    request: Request,
    body: AvailabilityRuleBody,
    db: AsyncSession = Depends(get_db),
    notifier: RuleChangeNotifier = Depends(get_notifier),
):
    rule = await AvailabilityRuleRepository(db).create(**body.model_dump())
    response = AvailabilityRuleResponse.model_validate(rule)
    await db.commit()
    await notifier.publish(body.service_type, body.region)
    return response


@router.put(
    "/availability-rules/{rule_id}",
    response_model=AvailabilityRuleResponse,
    dependencies=[rules_enabled],
    summary="Replace an availability rule",
)
@limiter.limit(current_rate_limit)
async def update_rule(
    request: Request,
    rule_id: int,
    body: AvailabilityRuleBody,
    db: AsyncSession = Depends(get_db),
    notifier: RuleChangeNotifier = Depends(get_notifier),
):
    repo = AvailabilityRuleRepository(db)
    rule = await repo.get_by_id(rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Rule not found")

    previous = (ServiceType(rule.service_type), rule.region)
    rule = await repo.update(rule, **body.model_dump())
    response = AvailabilityRuleResponse.model_validate(rule)
    await db.commit()

    await notifier.publish(*previous)
    if previous != (body.service_type, body.region):
        await notifier.publish(body.service_type, body.region)
    return response


@router.delete(
    "/availability-rules/{rule_id}",
    status_code=204,
    dependencies=[rules_enabled],
    summary="Delete an availability rule",
)
@limiter.limit(current_rate_limit)
async def delete_rule(
    request: Request,
    rule_id: int,
    db: AsyncSession = Depends(get_db),
    notifier: RuleChangeNotifier = Depends(get_notifier),
):
    repo = AvailabilityRuleRepository(db)
    rule = await repo.get_by_id(rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail="Rule not found")

    service_type, region = ServiceType(rule.service_type), rule.region
    await repo.delete(rule)
    await db.commit()
    await notifier.publish(service_type, region)
    return Response(status_code=204)


# ── Pricing settings ──────────────────────────────────────────────────


@router.get(
    "/pricing",
    response_model=list[PricingSettingsResponse],
    dependencies=[pricing_enabled],
    summary="Current pricing settings of every configured service",
)
@limiter.limit(current_rate_limit)
async def list_pricing(request: Request, db: AsyncSession = Depends(get_db)):
    return [settings_response(s) for s in await PricingSettingsRepository(db).list_all()]


@router.put(
    "/pricing/{service_type}",
    response_model=PricingSettingsResponse,
    dependencies=[pricing_enabled],
    summary="Update pricing settings (created from defaults if missing)",
)
@limiter.limit(current_rate_limit)
async def save_pricing(
    request: Request,
    service_type: ServiceType,
    body: PricingSettingsPatch,
    db: AsyncSession = Depends(get_db),
):
    patch = body.model_dump(exclude_unset=True)
    updated_by = patch.pop("updated_by", None)
    saved = await PricingSettingsRepository(db).save(service_type, patch, updated_by)
    return settings_response(saved)
