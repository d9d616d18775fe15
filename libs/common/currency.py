"""Currency conversion utilities for the store.

Internal storage unit: rupees as ``Decimal`` with two places.
Gateway unit: paise (smallest INR unit, 100 paise = ₹1), integer.

Conversion chain
----------------
Rupees × 100 → Paise
Paise  ÷ 100 → Rupees
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

PAISE_PER_RUPEE: int = 100

ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce a number (or ``None``) to a two-place rupee Decimal."""
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def rupees_to_paise(rupees) -> int:
    """Convert rupees to paise (round half-up). ₹1 = 100 paise."""
    return int(to_money(rupees) * PAISE_PER_RUPEE)


def paise_to_rupees(paise: int) -> Decimal:
    """Convert paise to rupees. 100 paise = ₹1."""
    return to_money(Decimal(paise) / PAISE_PER_RUPEE)
