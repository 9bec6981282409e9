"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - availability rules for the ``juiz_de_fora`` region (weekday day shift,
    weekend shift, and a Friday-night surge window)
  - one pricing configuration per service type
"""

import asyncio

from sqlalchemy import func, select

from src.domain.enums import ServiceFeeType, ServiceType
from src.infrastructure.database import async_session_factory, engine
from src.infrastructure.models import AvailabilityRuleModel, PricingSettingsModel

REGION = "juiz_de_fora"
WEEKDAYS = [1, 2, 3, 4, 5]
WEEKEND = [6, 7]


RULES = [
    # Moto taxi: all week, surge on Friday night
    {"service_type": ServiceType.MOTO_TAXI, "weekday_mask": WEEKDAYS, "time_start": "06:00", "time_end": "23:00", "surge_multiplier": 1.0},
    {"service_type": ServiceType.MOTO_TAXI, "weekday_mask": WEEKEND, "time_start": "08:00", "time_end": "22:00", "surge_multiplier": 1.0},
    {"service_type": ServiceType.MOTO_TAXI, "weekday_mask": [5], "time_start": "18:00", "time_end": "23:00", "surge_multiplier": 1.5, "notes": "Friday night"},
    # Passenger car: weekdays only
    {"service_type": ServiceType.PASSENGER_CAR, "weekday_mask": WEEKDAYS, "time_start": "07:00", "time_end": "20:00", "surge_multiplier": 1.0},
    {"service_type": ServiceType.PASSENGER_CAR, "weekday_mask": WEEKDAYS, "time_start": "17:00", "time_end": "19:00", "surge_multiplier": 1.2, "notes": "Rush hour"},
    # Deliveries: business hours
    {"service_type": ServiceType.DELIVERY_BIKE, "weekday_mask": WEEKDAYS + [6], "time_start": "09:00", "time_end": "18:00", "surge_multiplier": 1.0},
    {"service_type": ServiceType.DELIVERY_CAR, "weekday_mask": WEEKDAYS, "time_start": "09:00", "time_end": "18:00", "surge_multiplier": 1.0},
]

PRICING = [
    {"service_type": ServiceType.MOTO_TAXI, "price_per_km": 2.5, "service_fee_type": ServiceFeeType.FIXED, "service_fee_value": 1.0},
    {"service_type": ServiceType.PASSENGER_CAR, "price_per_km": 3.2, "service_fee_type": ServiceFeeType.PERCENT, "service_fee_value": 10.0},
    {"service_type": ServiceType.DELIVERY_BIKE, "fixed_price_active": True, "fixed_price": 12.0, "service_fee_type": ServiceFeeType.FIXED, "service_fee_value": 0.0},
    {"service_type": ServiceType.DELIVERY_CAR, "price_per_km": 4.0, "service_fee_type": ServiceFeeType.FIXED, "service_fee_value": 2.0},
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(
            select(func.count()).select_from(AvailabilityRuleModel)
        )
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Availability rules ────────────────────────────────────────
        for r in RULES:
            session.add(AvailabilityRuleModel(region=REGION, active=True, **r))
        await session.flush()
        print(f"  Created {len(RULES)} availability rules")

        # ── Pricing settings ──────────────────────────────────────────
        for p in PRICING:
            session.add(
                PricingSettingsModel(
                    price_per_km_active=not p.get("fixed_price_active", False),
                    **p,
                )
            )
        await session.flush()
        print(f"  Created {len(PRICING)} pricing settings")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
