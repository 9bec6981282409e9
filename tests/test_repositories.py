"""Repository tests against in-memory SQLite."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.enums import ServiceFeeType, ServiceType
from src.infrastructure.models import AvailabilityRuleModel, PricingSettingsModel
from src.infrastructure.repositories import (
    AvailabilityRuleRepository,
    PricingSettingsRepository,
)
from tests.conftest import REGION


def _rule(**overrides) -> dict:
    fields = dict(
        service_type=ServiceType.MOTO_TAXI,
        region=REGION,
        weekday_mask=[1, 2, 3],
        time_start="08:00",
        time_end="18:00",
        active=True,
        surge_multiplier=1.0,
    )
    fields.update(overrides)
    return fields


class TestAvailabilityRuleRepository:
    @pytest.mark.asyncio
    async def test_active_rules_filter_by_exact_pair(self, db_session: AsyncSession):
        repo = AvailabilityRuleRepository(db_session)
        await repo.create(**_rule(surge_multiplier=1.3))
        await repo.create(**_rule(active=False))
        await repo.create(**_rule(region="other_region"))
        await repo.create(**_rule(service_type=ServiceType.DELIVERY_CAR))
        await db_session.commit()

        rules = await repo.get_active_rules(ServiceType.MOTO_TAXI, REGION)

        assert len(rules) == 1
        assert rules[0].surge_multiplier == 1.3
        assert rules[0].weekday_mask == (1, 2, 3)
        assert rules[0].service_type == ServiceType.MOTO_TAXI

    @pytest.mark.asyncio
    async def test_no_rules_returns_empty_list(self, db_session: AsyncSession):
        repo = AvailabilityRuleRepository(db_session)
        assert await repo.get_active_rules(ServiceType.MOTO_TAXI, REGION) == []

    @pytest.mark.asyncio
    async def test_update_and_delete(self, db_session: AsyncSession):
        repo = AvailabilityRuleRepository(db_session)
        rule = await repo.create(**_rule())

        await repo.update(rule, time_end="20:00")
        assert (await repo.get_by_id(rule.id)).time_end == "20:00"

        await repo.delete(rule)
        assert await repo.get_by_id(rule.id) is None


class TestPricingSettingsRepository:
    @pytest.mark.asyncio
    async def test_missing_settings_is_none(self, db_session: AsyncSession):
        repo = PricingSettingsRepository(db_session)
        assert await repo.get_current(ServiceType.MOTO_TAXI) is None

    @pytest.mark.asyncio
    async def test_newest_row_wins(self, db_session: AsyncSession):
        now = datetime.now(timezone.utc)
        db_session.add_all(
            [
                PricingSettingsModel(
                    service_type=ServiceType.MOTO_TAXI,
                    price_per_km=9.0,
                    created_at=now,
                ),
                PricingSettingsModel(
                    service_type=ServiceType.MOTO_TAXI,
                    price_per_km=1.0,
                    created_at=now - timedelta(days=1),
                ),
            ]
        )
        await db_session.commit()

        current = await PricingSettingsRepository(db_session).get_current(
            ServiceType.MOTO_TAXI
        )

        assert current.price_per_km == 9.0

    @pytest.mark.asyncio
    async def test_save_creates_from_defaults(self, db_session: AsyncSession):
        repo = PricingSettingsRepository(db_session)

        saved = await repo.save(
            ServiceType.PASSENGER_CAR, {"service_fee_value": 5.0}, updated_by="admin-1"
        )

        assert saved.id is not None
        assert saved.price_per_km_active is True
        assert saved.price_per_km == 2.5
        assert saved.fixed_price is None
        assert saved.service_fee_type == ServiceFeeType.FIXED
        assert saved.service_fee_value == 5.0
        assert saved.updated_by == "admin-1"

    @pytest.mark.asyncio
    async def test_save_replaces_current_row(self, db_session: AsyncSession):
        repo = PricingSettingsRepository(db_session)
        first = await repo.save(ServiceType.MOTO_TAXI, {})
        second = await repo.save(
            ServiceType.MOTO_TAXI, {"fixed_price_active": True, "fixed_price": 15.0}
        )
        await db_session.commit()

        assert second.id == first.id
        assert second.fixed_price == 15.0
        assert [s.service_type for s in await repo.list_all()] == [ServiceType.MOTO_TAXI]


def test_rule_model_maps_to_entity():
    model = AvailabilityRuleModel(
        id=7,
        service_type=ServiceType.DELIVERY_BIKE,
        region=REGION,
        weekday_mask=[6, 7],
        time_start="09:00",
        time_end="12:00",
        active=True,
        surge_multiplier=1.4,
        notes="weekend",
    )
    entity = model.to_entity()
    assert entity.id == 7
    assert entity.weekday_mask == (6, 7)
    assert entity.matches(6, "10:00")
