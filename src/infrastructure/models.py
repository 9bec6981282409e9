"""
SQLAlchemy ORM models.

Tables
------
* ``service_availability_rules`` -- weekly time windows per (service, region)
* ``pricing_settings``           -- pricing configuration per service type

Indexes
-------
* **B-Tree** on ``(service_type, region, active)`` -- the exact filter the
  availability resolver runs on every call.
* **B-Tree** on ``(service_type, created_at)`` -- "newest row wins" lookup
  for pricing settings.

``weekday_mask`` is stored as JSON (an ``int[]`` on PostgreSQL would work
too) so the same models run on SQLite in tests.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Text,
    func,
)

from .database import Base
from src.domain.entities import AvailabilityRule, PricingSettings
from src.domain.enums import ServiceFeeType, ServiceType


def _enum(enum_cls, name: str) -> Enum:
    # persist the lowercase wire values ("moto_taxi"), not member names
    return Enum(
        enum_cls, name=name, values_callable=lambda e: [m.value for m in e]
    )


class AvailabilityRuleModel(Base):
    __tablename__ = "service_availability_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_type = Column(_enum(ServiceType, "servicetype"), nullable=False)
    region = Column(String(120), nullable=False)
    weekday_mask = Column(JSON, nullable=False, default=list)
    time_start = Column(String(5), nullable=False)  # "HH:MM"
    time_end = Column(String(5), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    surge_multiplier = Column(Float, default=1.0, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_rules_lookup", "service_type", "region", "active"),
    )

    def to_entity(self) -> AvailabilityRule:
        return AvailabilityRule(
            id=self.id,
            service_type=ServiceType(self.service_type),
            region=self.region,
            weekday_mask=tuple(int(d) for d in (self.weekday_mask or [])),
            time_start=self.time_start,
            time_end=self.time_end,
            active=bool(self.active),
            surge_multiplier=self.surge_multiplier,
            notes=self.notes,
        )


class PricingSettingsModel(Base):
    __tablename__ = "pricing_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_type = Column(_enum(ServiceType, "servicetype"), nullable=False)
    price_per_km_active = Column(Boolean, default=True, nullable=False)
    price_per_km = Column(Float, default=2.5, nullable=False)
    fixed_price_active = Column(Boolean, default=False, nullable=False)
    fixed_price = Column(Float, nullable=True)
    service_fee_type = Column(
        _enum(ServiceFeeType, "servicefeetype"),
        default=ServiceFeeType.FIXED,
        nullable=False,
    )
    service_fee_value = Column(Float, default=0.0, nullable=False)
    updated_by = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_pricing_service_created", "service_type", "created_at"),
    )

    def to_entity(self) -> PricingSettings:
        return PricingSettings(
            id=self.id,
            service_type=ServiceType(self.service_type),
            price_per_km_active=bool(self.price_per_km_active),
            price_per_km=float(self.price_per_km or 0),
            fixed_price_active=bool(self.fixed_price_active),
            fixed_price=(
                float(self.fixed_price) if self.fixed_price is not None else None
            ),
            service_fee_type=ServiceFeeType(self.service_fee_type),
            service_fee_value=float(self.service_fee_value or 0),
            updated_by=self.updated_by,
        )
