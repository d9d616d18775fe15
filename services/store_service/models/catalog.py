"""Store catalog models: the six product families and city reference data.

Each family lives in its own table with its own price fields. Carts and orders
point at products by ``(product_type, product_id)`` with no foreign key, so a
deleted product is only noticed when it is looked up again.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.store_service.models.enums import BatteryType, ProductType, enum_values
from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# SHARED PRODUCT COLUMNS
# ============================================================================


class ProductColumns:
    """Columns every product family carries."""

    product_type: ClassVar[ProductType]

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    features: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    images: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    model_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    warranty: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    dimension: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"


# ============================================================================
# POWER BACKUP FAMILIES (mrp / selling price)
# ============================================================================


class UPS(ProductColumns, Base):
    """Uninterruptible power supplies."""

    __tablename__ = "store_ups"
    product_type = ProductType.UPS

    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    output_power_wattage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    input_voltage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    output_voltage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    mrp: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    selling_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )


class Inverter(ProductColumns, Base):
    """Home inverters."""

    __tablename__ = "store_inverters"
    product_type = ProductType.INVERTER

    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_featured: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false"
    )
    mrp: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    selling_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )


class Battery(ProductColumns, Base):
    """Batteries. Trade-in prices are informational; carts price off ``mrp``."""

    __tablename__ = "store_batteries"
    product_type = ProductType.BATTERY

    battery_type: Mapped[Optional[BatteryType]] = mapped_column(
        SAEnum(
            BatteryType,
            values_callable=enum_values,
            name="store_battery_type_enum",
        ),
        nullable=True,
    )
    ah: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    nominal_filled_weight: Mapped[Optional[str]] = mapped_column(
        String(50), nullable=True
    )
    mrp: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    price_without_old_battery: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    price_with_old_battery: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )


# ============================================================================
# SOLAR FAMILIES (single price)
# ============================================================================


class SolarPV(ProductColumns, Base):
    """Solar photovoltaic modules."""

    __tablename__ = "store_solar_pv_modules"
    product_type = ProductType.SOLAR_PV

    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    sku: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    manufacturer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)


class SolarPCU(ProductColumns, Base):
    """Solar power conditioning units."""

    __tablename__ = "store_solar_pcus"
    product_type = ProductType.SOLAR_PCU

    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    wattage: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)


class SolarStreetLight(ProductColumns, Base):
    """Solar street lights."""

    __tablename__ = "store_solar_street_lights"
    product_type = ProductType.SOLAR_STREET_LIGHT

    power: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    replacement_policy: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)


# ============================================================================
# REFERENCE DATA
# ============================================================================


class City(Base):
    """Delivery cities and their flat delivery charge."""

    __tablename__ = "store_cities"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    state: Mapped[str] = mapped_column(String(50), nullable=False)
    delivery_charge: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, server_default="0"
    )
    estimated_delivery_days: Mapped[str] = mapped_column(
        String(50), default="3-5 days", server_default="3-5 days"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("delivery_charge >= 0", name="city_delivery_charge_non_negative"),
    )

    def __repr__(self):
        return f"<City {self.name}>"


PRODUCT_MODELS = (UPS, SolarPCU, SolarPV, SolarStreetLight, Inverter, Battery)
