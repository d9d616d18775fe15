"""Store Service models package."""

from services.store_service.models.catalog import (
    PRODUCT_MODELS,
    UPS,
    Battery,
    City,
    Inverter,
    SolarPCU,
    SolarPV,
    SolarStreetLight,
)
from services.store_service.models.commerce import Cart, CartItem, Order, OrderItem
from services.store_service.models.enums import (
    BatteryType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProductType,
)

__all__ = [
    "Battery",
    "BatteryType",
    "Cart",
    "CartItem",
    "City",
    "Inverter",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PRODUCT_MODELS",
    "PaymentMethod",
    "PaymentStatus",
    "ProductType",
    "SolarPCU",
    "SolarPV",
    "SolarStreetLight",
    "UPS",
]
