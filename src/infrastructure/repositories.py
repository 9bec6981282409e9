"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  ``AvailabilityRuleRepository`` satisfies the
resolver's ``RuleSource`` protocol.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import AvailabilityRuleModel, PricingSettingsModel
from src.domain.entities import AvailabilityRule, PricingSettings
from src.domain.enums import ServiceType
from src.domain.pricing import default_pricing_settings


class AvailabilityRuleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_active_rules(
        self, service_type: ServiceType, region: str
    ) -> list[AvailabilityRule]:
        result = await self.session.execute(
            select(AvailabilityRuleModel).where(
                AvailabilityRuleModel.service_type == service_type,
                AvailabilityRuleModel.region == region,
                AvailabilityRuleModel.active.is_(True),
            )
        )
        return [row.to_entity() for row in result.scalars().all()]

    async def list_all(self) -> list[AvailabilityRuleModel]:
        result = await self.session.execute(
            select(AvailabilityRuleModel).order_by(
                AvailabilityRuleModel.service_type, AvailabilityRuleModel.id
            )
        )
        return list(result.scalars().all())

    async def get_by_id(self, rule_id: int) -> Optional[AvailabilityRuleModel]:
        return await self.session.get(AvailabilityRuleModel, rule_id)

    async def create(self, **fields: Any) -> AvailabilityRuleModel:
        rule = AvailabilityRuleModel(**fields)
        self.session.add(rule)
        await self.session.flush()
        return rule

    async def update(
        self, rule: AvailabilityRuleModel, **fields: Any
    ) -> AvailabilityRuleModel:
        for key, value in fields.items():
            setattr(rule, key, value)
        await self.session.flush()
        return rule

    async def delete(self, rule: AvailabilityRuleModel) -> None:
        await self.session.delete(rule)
        await self.session.flush()


class PricingSettingsRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _current_row(
        self, service_type: ServiceType
    ) -> Optional[PricingSettingsModel]:
        result = await self.session.execute(
            select(PricingSettingsModel)
            .where(PricingSettingsModel.service_type == service_type)
            .order_by(
                PricingSettingsModel.created_at.desc(),
                PricingSettingsModel.id.desc(),
            )
            .limit(1)
        )
        return result.scalars().first()

    async def get_current(self, service_type: ServiceType) -> Optional[PricingSettings]:
        """Newest row for *service_type*, or ``None`` when never configured."""
        row = await self._current_row(service_type)
        return row.to_entity() if row else None

    async def list_all(self) -> list[PricingSettings]:
        current: list[PricingSettings] = []
        for service_type in ServiceType:
            found = await self.get_current(service_type)
            if found:
                current.append(found)
        return current

    async def save(
        self,
        service_type: ServiceType,
        patch: dict[str, Any],
        updated_by: Optional[str] = None,
    ) -> PricingSettings:
        """Replace the current row, creating it from the defaults if missing."""
        row = await self._current_row(service_type)
        if row is None:
            defaults = default_pricing_settings(service_type)
            row = PricingSettingsModel(
                service_type=service_type,
                price_per_km_active=defaults.price_per_km_active,
                price_per_km=defaults.price_per_km,
                fixed_price_active=defaults.fixed_price_active,
                fixed_price=defaults.fixed_price,
                service_fee_type=defaults.service_fee_type,
                service_fee_value=defaults.service_fee_value,
            )
            self.session.add(row)

        for key, value in patch.items():
            setattr(row, key, value)
        row.updated_by = updated_by
        await self.session.flush()
        return row.to_entity()
