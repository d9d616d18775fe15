"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    ups = UPSFactory.create(selling_price=Decimal("4999"))
    db_session.add(ups)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _suffix() -> str:
    return uuid.uuid4().hex[:6]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class UPSFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import UPS

        defaults = {
            "id": _uuid(),
            "name": f"Home UPS 1100VA {_suffix()}",
            "brand": "Luminous",
            "category": "Home UPS",
            "image": "https://cdn.example.com/ups.png",
            "type": "line-interactive",
            "output_power_wattage": 660,
            "mrp": Decimal("7499.00"),
            "selling_price": Decimal("5999.00"),
        }
        defaults.update(overrides)
        return UPS(**defaults)


class InverterFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Inverter

        defaults = {
            "id": _uuid(),
            "name": f"Sine Wave Inverter {_suffix()}",
            "brand": "Microtek",
            "capacity": 1500,
            "mrp": Decimal("11990.00"),
            "selling_price": Decimal("9490.00"),
        }
        defaults.update(overrides)
        return Inverter(**defaults)


class BatteryFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Battery, BatteryType

        defaults = {
            "id": _uuid(),
            "name": f"Tubular Battery 150Ah {_suffix()}",
            "brand": "Exide",
            "battery_type": BatteryType.LEAD_ACID,
            "ah": 150,
            "mrp": Decimal("17500.00"),
            "price_without_old_battery": Decimal("15200.00"),
            "price_with_old_battery": Decimal("13400.00"),
        }
        defaults.update(overrides)
        return Battery(**defaults)


class SolarPVFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import SolarPV

        defaults = {
            "id": _uuid(),
            "name": f"Mono PERC 540Wp {_suffix()}",
            "brand": "Waaree",
            "sku": f"WS-{_suffix()}",
            "price": Decimal("14850.00"),
        }
        defaults.update(overrides)
        return SolarPV(**defaults)


class SolarPCUFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import SolarPCU

        defaults = {
            "id": _uuid(),
            "name": f"Solar PCU 3kVA {_suffix()}",
            "wattage": 3000,
            "price": Decimal("23500.00"),
        }
        defaults.update(overrides)
        return SolarPCU(**defaults)


class SolarStreetLightFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import SolarStreetLight

        defaults = {
            "id": _uuid(),
            "name": f"Solar Street Light 30W {_suffix()}",
            "power": 30,
            "price": Decimal("6800.00"),
        }
        defaults.update(overrides)
        return SolarStreetLight(**defaults)


class CityFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import City

        defaults = {
            "id": _uuid(),
            "name": f"Jaipur-{_suffix()}",
            "state": "Rajasthan",
            "delivery_charge": Decimal("350.00"),
            "estimated_delivery_days": "3-5 days",
            "is_active": True,
        }
        defaults.update(overrides)
        return City(**defaults)


# ---------------------------------------------------------------------------
# Carts & orders
# ---------------------------------------------------------------------------


class CartItemFactory:
    @staticmethod
    def create(product, **overrides):
        from services.store_service.models import CartItem

        defaults = {
            "id": _uuid(),
            "product_type": product.product_type,
            "product_id": product.id,
            "quantity": 1,
            "with_old_battery": False,
            "position": 0,
        }
        defaults.update(overrides)
        return CartItem(**defaults)


class CartFactory:
    @staticmethod
    def create(user_id: str, items=None, **overrides):
        from services.store_service.models import Cart

        defaults = {
            "id": _uuid(),
            "user_id": user_id,
            "total_amount": Decimal("0.00"),
            "items": list(items or []),
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Cart(**defaults)


class OrderFactory:
    @staticmethod
    def create(user_id: str, product=None, **overrides):
        from services.store_service.models import (
            Order,
            OrderItem,
            OrderStatus,
            PaymentMethod,
            PaymentStatus,
        )

        items = []
        subtotal = Decimal("0.00")
        if product is not None:
            price = getattr(product, "selling_price", None) or getattr(
                product, "price", None
            ) or getattr(product, "mrp", None)
            items.append(
                OrderItem(
                    id=_uuid(),
                    product_type=product.product_type,
                    product_id=product.id,
                    product_name=product.name,
                    quantity=1,
                    price=price,
                    total_price=price,
                    position=0,
                )
            )
            subtotal = price

        defaults = {
            "id": _uuid(),
            "order_number": f"ORD{uuid.uuid4().int % 10**9:09d}",
            "user_id": user_id,
            "shipping_details": {
                "full_name": "Asha Verma",
                "email": "asha@example.com",
                "phone": "9876543210",
                "address": "12 MG Road",
                "pincode": "302001",
            },
            "payment_method": PaymentMethod.COD,
            "payment_status": PaymentStatus.PENDING,
            "subtotal": subtotal,
            "delivery_charge": Decimal("0.00"),
            "tax": Decimal("0.00"),
            "total": subtotal,
            "status": OrderStatus.PENDING,
            "items": items,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Order(**defaults)


def shipping_payload(city=None, **overrides) -> dict:
    """camelCase shipping info body as the storefront sends it."""
    payload = {
        "fullName": "Asha Verma",
        "email": "asha@example.com",
        "phone": "9876543210",
        "address": "12 MG Road",
        "pincode": "302001",
    }
    if city is not None:
        payload["cityId"] = str(city.id)
    payload.update(overrides)
    return payload
