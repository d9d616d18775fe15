"""Seed script for store test data.

Creates delivery cities and one product per family so the cart, COD and
Razorpay checkout flows can be exercised end-to-end.

Usage:
    cd powerstore-backend
    python -m services.store_service.seed_store_data
"""

import asyncio
from decimal import Decimal

from sqlalchemy import func, select

from libs.db.config import AsyncSessionLocal
from services.store_service.models import (
    UPS,
    Battery,
    BatteryType,
    City,
    Inverter,
    SolarPCU,
    SolarPV,
    SolarStreetLight,
)


async def seed_store_data():
    async with AsyncSessionLocal() as db:
        print("Seeding store data...")

        # Check if data already exists
        count = await db.scalar(select(func.count()).select_from(City))
        if count and count > 0:
            print(f"Store data already exists ({count} cities). Skipping seed.")
            return

        # =========================================================================
        # 1. CITIES
        # =========================================================================
        cities = [
            City(name="Delhi", state="Delhi", delivery_charge=Decimal("0")),
            City(
                name="Gurugram",
                state="Haryana",
                delivery_charge=Decimal("150"),
                estimated_delivery_days="2-3 days",
            ),
            City(name="Jaipur", state="Rajasthan", delivery_charge=Decimal("350")),
            City(
                name="Lucknow",
                state="Uttar Pradesh",
                delivery_charge=Decimal("400"),
                estimated_delivery_days="5-7 days",
            ),
        ]
        db.add_all(cities)

        # =========================================================================
        # 2. PRODUCTS (one per family)
        # =========================================================================
        products = [
            UPS(
                name="Line Interactive UPS 1100VA",
                brand="Luminous",
                category="Home UPS",
                type="line-interactive",
                output_power_wattage=660,
                input_voltage=230,
                output_voltage=230,
                mrp=Decimal("7499"),
                selling_price=Decimal("5999"),
                warranty="2 years",
            ),
            Inverter(
                name="Sine Wave Inverter 1500VA",
                brand="Microtek",
                category="Home Inverter",
                capacity=1500,
                is_featured=True,
                mrp=Decimal("11990"),
                selling_price=Decimal("9490"),
                warranty="2 years",
            ),
            Battery(
                name="Tall Tubular Battery 150Ah",
                brand="Exide",
                category="Inverter Battery",
                battery_type=BatteryType.LEAD_ACID,
                ah=150,
                nominal_filled_weight="52 kg",
                mrp=Decimal("17500"),
                price_without_old_battery=Decimal("15200"),
                price_with_old_battery=Decimal("13400"),
                warranty="48 months",
            ),
            SolarPV(
                name="Mono PERC Module 540Wp",
                brand="Waaree",
                category="Solar Panels",
                type="mono-perc",
                sku="WS-540",
                weight=Decimal("27.5"),
                manufacturer="Waaree Energies",
                price=Decimal("14850"),
            ),
            SolarPCU(
                name="Solar PCU 3kVA / 48V",
                brand="UTL",
                category="Solar PCU",
                type="mppt",
                wattage=3000,
                weight=Decimal("18.2"),
                price=Decimal("23500"),
            ),
            SolarStreetLight(
                name="All-in-One Solar Street Light 30W",
                brand="Havells",
                category="Street Lighting",
                power=30,
                replacement_policy="1 year replacement",
                price=Decimal("6800"),
            ),
        ]
        db.add_all(products)

        await db.commit()

        print(f"Seeded {len(cities)} cities and {len(products)} products.")
        for product in products:
            print(f"  {product.product_type.value:<20} {product.id}  {product.name}")


if __name__ == "__main__":
    asyncio.run(seed_store_data())
