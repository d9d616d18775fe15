"""Enum definitions for store service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class ProductType(str, enum.Enum):
    UPS = "ups"
    SOLAR_PCU = "solar-pcu"
    SOLAR_PV = "solar-pv"
    SOLAR_STREET_LIGHT = "solar-street-light"
    INVERTER = "inverter"
    BATTERY = "battery"


class BatteryType(str, enum.Enum):
    LI_ION = "li ion"
    LEAD_ACID = "lead acid"
    SMF = "smf"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


class PaymentMethod(str, enum.Enum):
    COD = "cod"
    RAZORPAY = "razorpay"
