"""Cart operations: find-or-create, merge-on-add, quantity updates, removal.

Every mutation re-prices the whole cart against live catalog prices and stores
the result in ``Cart.total_amount``. The total is a snapshot: catalog prices can
move afterwards, and checkout re-prices again.
"""

from decimal import Decimal
from typing import Any, Optional

from libs.common.currency import ZERO, to_money
from libs.common.logging import get_logger
from services.store_service.catalog import CatalogRegistry, cart_unit_price
from services.store_service.errors import NotFoundError, ValidationError
from services.store_service.models import Cart, CartItem
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


async def get_cart(db: AsyncSession, user_id: str) -> Optional[Cart]:
    """Return the user's cart with items loaded, or ``None``."""
    query = (
        select(Cart)
        .where(Cart.user_id == user_id)
        .order_by(Cart.created_at)
        .options(selectinload(Cart.items))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    return result.scalars().first()


async def get_or_create_cart(db: AsyncSession, user_id: str) -> Cart:
    cart = await get_cart(db, user_id)
    if cart:
        return cart

    cart = Cart(user_id=user_id, total_amount=ZERO, items=[])
    db.add(cart)
    await db.flush()
    logger.info("Created cart %s for user %s", cart.id, user_id)
    return cart


def find_item(cart: Cart, product_type, product_id) -> Optional[CartItem]:
    for item in cart.items:
        if item.product_type == product_type and item.product_id == product_id:
            return item
    return None


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


async def recompute_total(
    db: AsyncSession, registry: CatalogRegistry, cart: Cart
) -> Decimal:
    """Re-price every line from the live catalog and store the sum on the cart.

    A line whose product no longer exists adds nothing and stays in the cart;
    it is only stripped by :func:`remove_product_everywhere` or at checkout.
    """
    products = await registry.find_many(
        db, [(item.product_type, item.product_id) for item in cart.items]
    )

    total = ZERO
    for item in cart.items:
        product = products.get((item.product_type, item.product_id))
        if product is None:
            continue
        total += cart_unit_price(product) * item.quantity

    cart.total_amount = to_money(total)
    return cart.total_amount


def _check_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Quantity must be a positive number")
    return quantity


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def add_item(
    db: AsyncSession,
    registry: CatalogRegistry,
    *,
    user_id: str,
    product_type: Any,
    product_id: Any,
    quantity: int = 1,
    with_old_battery: Optional[bool] = None,
) -> Cart:
    """Add a product to the user's cart, merging into an existing line."""
    product_type, product_id = registry.parse_ref(product_type, product_id)
    quantity = _check_quantity(quantity)

    product = await registry.find(db, product_type, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    cart = await get_or_create_cart(db, user_id)

    existing = find_item(cart, product_type, product_id)
    if existing:
        existing.quantity += quantity
        # Only touch the trade-in flag when the client sent it
        if with_old_battery is not None:
            existing.with_old_battery = with_old_battery
    else:
        next_position = max((item.position for item in cart.items), default=-1) + 1
        cart.items.append(
            CartItem(
                product_type=product_type,
                product_id=product_id,
                quantity=quantity,
                with_old_battery=bool(with_old_battery),
                position=next_position,
            )
        )

    await recompute_total(db, registry, cart)
    await db.commit()
    return await get_cart(db, user_id)


async def update_item_quantity(
    db: AsyncSession,
    registry: CatalogRegistry,
    *,
    user_id: str,
    product_type: Any,
    product_id: Any,
    quantity: int,
) -> Cart:
    """Overwrite the quantity of an existing cart line."""
    product_type, product_id = registry.parse_ref(product_type, product_id)
    quantity = _check_quantity(quantity)

    cart = await get_cart(db, user_id)
    if cart is None:
        raise NotFoundError("Cart not found")

    item = find_item(cart, product_type, product_id)
    if item is None:
        raise NotFoundError("Item not found in cart")

    item.quantity = quantity

    await recompute_total(db, registry, cart)
    await db.commit()
    return await get_cart(db, user_id)


async def remove_item(
    db: AsyncSession,
    registry: CatalogRegistry,
    *,
    user_id: str,
    product_type: Any,
    product_id: Any,
) -> Cart:
    """Remove a line from the cart. Removing an absent line is a no-op."""
    product_type, product_id = registry.parse_ref(product_type, product_id)

    cart = await get_cart(db, user_id)
    if cart is None:
        raise NotFoundError("Cart not found")

    item = find_item(cart, product_type, product_id)
    if item is not None:
        cart.items.remove(item)

    await recompute_total(db, registry, cart)
    await db.commit()
    return await get_cart(db, user_id)


def clear_cart(cart: Cart) -> None:
    """Empty the cart in the current unit of work (caller commits)."""
    cart.items.clear()
    cart.total_amount = ZERO


async def remove_product_everywhere(
    db: AsyncSession,
    registry: CatalogRegistry,
    product_type: Any,
    product_id: Any,
) -> int:
    """Strip a product from every cart holding it and re-price those carts.

    Called when a product is deleted from the catalog. Returns the number of
    carts updated.
    """
    product_type, product_id = registry.parse_ref(product_type, product_id)

    holding = select(CartItem.cart_id).where(
        CartItem.product_type == product_type,
        CartItem.product_id == product_id,
    )
    query = (
        select(Cart)
        .where(Cart.id.in_(holding))
        .options(selectinload(Cart.items))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    carts = list(result.scalars().all())

    for cart in carts:
        item = find_item(cart, product_type, product_id)
        if item is not None:
            cart.items.remove(item)
        await recompute_total(db, registry, cart)

    await db.commit()

    logger.info(
        "Removed %s %s from %d carts",
        product_type.value,
        product_id,
        len(carts),
        extra={"extra_fields": {
            "product_type": product_type.value,
            "product_id": str(product_id),
            "carts_updated": len(carts),
        }},
    )
    return len(carts)
