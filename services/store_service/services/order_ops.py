"""Order materialization and the order query/status surface.

``materialize_order`` turns the user's cart into a price-frozen order and
empties the cart in the same transaction: the order exists iff the cart was
cleared. Order numbers are ``ORD{YY}{MM}{DD}{seq:03d}`` with ``seq`` derived
from a count of today's orders; a collision on the unique column is retried.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from libs.common.config import get_settings
from libs.common.currency import ZERO, rupees_to_paise, to_money
from libs.common.datetime_utils import utc_day_bounds, utc_now
from libs.common.logging import get_logger
from services.store_service.catalog import CatalogRegistry, ProductRef, order_unit_price
from services.store_service.errors import (
    ConsistencyFailure,
    NotFoundError,
    TransientInfra,
    ValidationError,
)
from services.store_service.models import (
    Cart,
    City,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProductType,
)
from services.store_service.services import cart_ops
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Checkout pricing
# ---------------------------------------------------------------------------


@dataclass
class PricedLine:
    product_type: ProductType
    product_id: uuid.UUID
    product_name: Optional[str]
    quantity: int
    price: Decimal
    with_old_battery: Optional[bool] = None

    @property
    def total_price(self) -> Decimal:
        return to_money(self.price * self.quantity)


@dataclass
class CheckoutQuote:
    """Frozen prices for every cart line plus the delivery charge."""

    cart: Cart
    lines: list[PricedLine] = field(default_factory=list)
    delivery_charge: Decimal = ZERO
    tax: Decimal = ZERO

    @property
    def subtotal(self) -> Decimal:
        return to_money(sum((line.total_price for line in self.lines), ZERO))

    @property
    def total(self) -> Decimal:
        return to_money(self.subtotal + self.delivery_charge + self.tax)

    @property
    def amount_minor_units(self) -> int:
        return rupees_to_paise(self.total)


async def find_city(db: AsyncSession, city_id: Any) -> Optional[City]:
    """Look up a city by id; malformed or unknown ids resolve to ``None``."""
    if not city_id:
        return None
    try:
        city_uuid = city_id if isinstance(city_id, uuid.UUID) else uuid.UUID(str(city_id))
    except ValueError:
        return None
    return await db.get(City, city_uuid)


async def get_city(db: AsyncSession, city_id: Any) -> City:
    city = await find_city(db, city_id)
    if city is None:
        raise NotFoundError("City not found.")
    return city


async def resolve_delivery_charge(db: AsyncSession, city_id: Any) -> Decimal:
    """Delivery charge for ``city_id``, 0 when absent or unknown."""
    city = await find_city(db, city_id)
    return to_money(city.delivery_charge) if city else ZERO


async def quote_cart(
    db: AsyncSession,
    registry: CatalogRegistry,
    cart: Optional[Cart],
    delivery_charge: Decimal = ZERO,
) -> CheckoutQuote:
    """Price every cart line from the live catalog.

    Raises ConsistencyFailure when the cart is empty or any line's product has
    been deleted; nothing is written in either case.
    """
    if cart is None or not cart.items:
        raise ConsistencyFailure("Cart is empty")

    products = await registry.find_many(
        db, [(item.product_type, item.product_id) for item in cart.items]
    )

    quote = CheckoutQuote(cart=cart, delivery_charge=to_money(delivery_charge))
    for item in cart.items:
        product = products.get((item.product_type, item.product_id))
        if product is None:
            raise ConsistencyFailure(
                f"Product not found: {item.product_id}", status_code=404
            )
        quote.lines.append(
            PricedLine(
                product_type=item.product_type,
                product_id=item.product_id,
                product_name=product.name,
                quantity=item.quantity,
                price=order_unit_price(product),
                with_old_battery=(
                    item.with_old_battery
                    if item.product_type == ProductType.BATTERY
                    else None
                ),
            )
        )
    return quote


# ---------------------------------------------------------------------------
# Materialization
# ---------------------------------------------------------------------------


async def next_order_number(db: AsyncSession, now: datetime) -> str:
    """``ORD{YY}{MM}{DD}{seq:03d}``, seq = 1 + orders already created today (UTC)."""
    start, end = utc_day_bounds(now)
    count = await db.scalar(
        select(func.count())
        .select_from(Order)
        .where(Order.created_at >= start, Order.created_at < end)
    )
    return f"ORD{start:%y%m%d}{(count or 0) + 1:03d}"


def _build_order(
    quote: CheckoutQuote,
    *,
    order_number: str,
    user_id: str,
    shipping_details: dict,
    payment_method: PaymentMethod,
    now: datetime,
    gateway_order_id: Optional[str],
    gateway_payment_id: Optional[str],
    gateway_signature: Optional[str],
) -> Order:
    paid = payment_method == PaymentMethod.RAZORPAY
    return Order(
        order_number=order_number,
        user_id=user_id,
        shipping_details=shipping_details,
        payment_method=payment_method,
        payment_status=PaymentStatus.PAID if paid else PaymentStatus.PENDING,
        gateway_order_id=gateway_order_id,
        gateway_payment_id=gateway_payment_id,
        gateway_signature=gateway_signature,
        amount_paid=quote.total if paid else None,
        subtotal=quote.subtotal,
        delivery_charge=quote.delivery_charge,
        tax=quote.tax,
        total=quote.total,
        status=OrderStatus.CONFIRMED if paid else OrderStatus.PENDING,
        created_at=now,
        updated_at=now,
        items=[
            OrderItem(
                product_type=line.product_type,
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                price=line.price,
                total_price=line.total_price,
                with_old_battery=line.with_old_battery,
                position=position,
            )
            for position, line in enumerate(quote.lines)
        ],
    )


async def _fill_city(db: AsyncSession, shipping_details: dict) -> dict:
    city = await find_city(db, shipping_details.get("city_id"))
    if city is not None:
        shipping_details = dict(shipping_details)
        shipping_details["city"] = shipping_details.get("city") or city.name
        shipping_details["state"] = shipping_details.get("state") or city.state
    return shipping_details


async def materialize_order(
    db: AsyncSession,
    registry: CatalogRegistry,
    *,
    user_id: str,
    shipping_details: dict,
    payment_method: PaymentMethod,
    gateway_order_id: Optional[str] = None,
    gateway_payment_id: Optional[str] = None,
    gateway_signature: Optional[str] = None,
    expected_amount_minor_units: Optional[int] = None,
) -> tuple[Order, bool]:
    """Create an order from the user's cart and clear the cart, atomically.

    Returns ``(order, created)``. ``created`` is False only when a concurrent
    request already recorded an order for ``gateway_payment_id``.

    When ``expected_amount_minor_units`` is given (the amount the gateway
    collected), the order total must match it to the paisa.
    """
    attempts = max(1, get_settings().ORDER_NUMBER_RETRIES)
    shipping_details = await _fill_city(db, shipping_details)

    for attempt in range(1, attempts + 1):
        cart = await cart_ops.get_cart(db, user_id)
        delivery_charge = await resolve_delivery_charge(
            db, shipping_details.get("city_id")
        )
        quote = await quote_cart(db, registry, cart, delivery_charge)

        if (
            expected_amount_minor_units is not None
            and quote.amount_minor_units != expected_amount_minor_units
        ):
            logger.warning(
                "Paid amount mismatch for user %s: paid=%s expected=%s",
                user_id,
                expected_amount_minor_units,
                quote.amount_minor_units,
                extra={"extra_fields": {
                    "gateway_order_id": gateway_order_id,
                    "gateway_payment_id": gateway_payment_id,
                    "paid": expected_amount_minor_units,
                    "expected": quote.amount_minor_units,
                }},
            )
            raise ConsistencyFailure("Paid amount does not match the order total")

        now = utc_now()
        order = _build_order(
            quote,
            order_number=await next_order_number(db, now),
            user_id=user_id,
            shipping_details=shipping_details,
            payment_method=payment_method,
            now=now,
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            gateway_signature=gateway_signature,
        )
        db.add(order)
        cart_ops.clear_cart(quote.cart)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()

            if gateway_payment_id:
                existing = await find_order_by_payment_id(db, gateway_payment_id)
                if existing is not None:
                    logger.info(
                        "Payment %s already recorded as %s",
                        gateway_payment_id,
                        existing.order_number,
                    )
                    return existing, False

            logger.warning(
                "Order number %s collided (attempt %d/%d)",
                order.order_number,
                attempt,
                attempts,
            )
            continue

        logger.info(
            "Order %s placed for user %s (%s, total=%s)",
            order.order_number,
            user_id,
            payment_method.value,
            quote.total,
            extra={"extra_fields": {
                "order_number": order.order_number,
                "payment_method": payment_method.value,
                "total": str(quote.total),
                "lines": len(quote.lines),
            }},
        )
        return await get_order(db, order.id), True

    raise TransientInfra("Could not assign an order number, please retry")


async def place_cod_order(
    db: AsyncSession,
    registry: CatalogRegistry,
    *,
    user_id: str,
    shipping_details: dict,
) -> Order:
    order, _ = await materialize_order(
        db,
        registry,
        user_id=user_id,
        shipping_details=shipping_details,
        payment_method=PaymentMethod.COD,
    )
    return order


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _order_query():
    return (
        select(Order)
        .options(selectinload(Order.items))
        .execution_options(populate_existing=True)
    )


def parse_order_id(value: Any) -> uuid.UUID:
    # Malformed ids are indistinguishable from unknown ones to the caller
    try:
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
    except ValueError:
        raise NotFoundError("Order not found")


async def get_order(db: AsyncSession, order_id: uuid.UUID) -> Optional[Order]:
    result = await db.execute(_order_query().where(Order.id == order_id))
    return result.scalar_one_or_none()


async def find_order_by_payment_id(
    db: AsyncSession, gateway_payment_id: str
) -> Optional[Order]:
    result = await db.execute(
        _order_query().where(Order.gateway_payment_id == gateway_payment_id)
    )
    return result.scalar_one_or_none()


async def get_order_for_user(
    db: AsyncSession, order_id: Any, *, user_id: Optional[str]
) -> Order:
    """Fetch an order; with ``user_id`` set, another user's order is NotFound."""
    query = _order_query().where(Order.id == parse_order_id(order_id))
    if user_id is not None:
        query = query.where(Order.user_id == user_id)

    result = await db.execute(query)
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order not found")
    return order


async def _paginate(
    db: AsyncSession, filters: list, page: int, limit: int
) -> tuple[list[Order], int]:
    total = await db.scalar(select(func.count()).select_from(Order).where(*filters))
    result = await db.execute(
        _order_query()
        .where(*filters)
        .order_by(Order.created_at.desc(), Order.order_number.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def list_orders_for_user(
    db: AsyncSession, user_id: str, *, page: int = 1, limit: int = 10
) -> tuple[list[Order], int]:
    """The user's orders, newest first, with the unpaginated total."""
    return await _paginate(db, [Order.user_id == user_id], page, limit)


async def list_all_orders(
    db: AsyncSession,
    *,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Order], int]:
    """Admin listing. ``status="all"`` disables the status filter.

    ``search`` matches order number, shipping name or shipping email
    (case-insensitive substring).
    """
    filters = []
    if status and status != "all":
        try:
            filters.append(Order.status == OrderStatus(status))
        except ValueError:
            raise ValidationError("Invalid order status")

    if search:
        pattern = f"%{search.strip()}%"
        filters.append(
            or_(
                Order.order_number.ilike(pattern),
                Order.shipping_details["full_name"].as_string().ilike(pattern),
                Order.shipping_details["email"].as_string().ilike(pattern),
            )
        )

    return await _paginate(db, filters, page, limit)


async def load_order_products(
    db: AsyncSession, registry: CatalogRegistry, orders: Sequence[Order]
) -> dict[ProductRef, Any]:
    """Live products for every line of ``orders``; deleted ones are absent."""
    return await registry.find_many(
        db,
        [
            (item.product_type, item.product_id)
            for order in orders
            for item in order.items
        ],
    )


# ---------------------------------------------------------------------------
# Status updates
# ---------------------------------------------------------------------------


async def update_order_status(
    db: AsyncSession,
    order_id: Any,
    *,
    status: OrderStatus,
    notes: Optional[str] = None,
    delivery_date: Optional[date] = None,
) -> Order:
    """Overwrite the order status; any status may follow any other."""
    order = await get_order_for_user(db, order_id, user_id=None)

    previous = order.status
    order.status = status
    if notes is not None:
        order.notes = notes
    if delivery_date is not None:
        order.delivery_date = delivery_date
    order.updated_at = utc_now()

    await db.commit()

    logger.info(
        "Order %s status %s -> %s",
        order.order_number,
        previous.value,
        status.value,
    )
    return await get_order(db, order.id)
