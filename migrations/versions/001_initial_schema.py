"""Initial schema: availability rules and pricing settings.

Revision ID: 001
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "001"
down_revision = None
branch_labels = None
depends_on = None

SERVICE_TYPES = ("moto_taxi", "passenger_car", "delivery_bike", "delivery_car")


def upgrade() -> None:
    # ── service_availability_rules ────────────────────────────────────
    op.create_table(
        "service_availability_rules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "service_type",
            sa.Enum(*SERVICE_TYPES, name="servicetype"),
            nullable=False,
        ),
        sa.Column("region", sa.String(120), nullable=False),
        sa.Column("weekday_mask", sa.JSON, nullable=False),
        sa.Column("time_start", sa.String(5), nullable=False),
        sa.Column("time_end", sa.String(5), nullable=False),
        sa.Column("active", sa.Boolean, default=True, nullable=False),
        sa.Column("surge_multiplier", sa.Float, default=1.0, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_rules_lookup",
        "service_availability_rules",
        ["service_type", "region", "active"],
    )

    # ── pricing_settings ──────────────────────────────────────────────
    op.create_table(
        "pricing_settings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "service_type",
            postgresql.ENUM(*SERVICE_TYPES, name="servicetype", create_type=False),
            nullable=False,
        ),
        sa.Column("price_per_km_active", sa.Boolean, default=True, nullable=False),
        sa.Column("price_per_km", sa.Float, default=2.5, nullable=False),
        sa.Column("fixed_price_active", sa.Boolean, default=False, nullable=False),
        sa.Column("fixed_price", sa.Float, nullable=True),
        sa.Column(
            "service_fee_type",
            sa.Enum("fixed", "percent", name="servicefeetype"),
            default="fixed",
            nullable=False,
        ),
        sa.Column("service_fee_value", sa.Float, default=0.0, nullable=False),
        sa.Column("updated_by", sa.String(64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "idx_pricing_service_created",
        "pricing_settings",
        ["service_type", "created_at"],
    )


def downgrade() -> None:
    op.drop_table("pricing_settings")
    op.drop_table("service_availability_rules")
    op.execute("DROP TYPE IF EXISTS servicefeetype")
    op.execute("DROP TYPE IF EXISTS servicetype")
