"""Two-phase Razorpay checkout.

1. ``create_payment_intent`` prices the cart (plus the city's delivery charge)
   and opens a gateway order for that amount.
2. ``verify_and_place_order`` checks the checkout signature, optionally
   cross-checks the amount the gateway order was opened for, and materializes
   the store order.
"""

from typing import Any

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_service.catalog import CatalogRegistry
from services.store_service.errors import (
    AuthenticityError,
    ConsistencyFailure,
    TransientInfra,
    ValidationError,
)
from services.store_service.models import Order, PaymentMethod
from services.store_service.razorpay_client import RazorpayClient, RazorpayError
from services.store_service.services import cart_ops, order_ops
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _gateway_failure(exc: RazorpayError) -> TransientInfra:
    return TransientInfra(exc.message, status_code=502)


async def create_payment_intent(
    db: AsyncSession,
    registry: CatalogRegistry,
    gateway: RazorpayClient,
    *,
    user_id: str,
    city_id: Any,
) -> dict:
    """Open a gateway order sized to the checkout total, in paise.

    Returns the gateway's order handle unchanged.
    """
    if not city_id:
        raise ValidationError("City is required.")

    cart = await cart_ops.get_cart(db, user_id)
    if cart is None or not cart.items:
        raise ConsistencyFailure("Cart is empty")

    city = await order_ops.get_city(db, city_id)
    quote = await order_ops.quote_cart(db, registry, cart, city.delivery_charge)

    settings = get_settings()
    receipt = f"receipt_order_{int(utc_now().timestamp() * 1000)}"

    try:
        gateway_order = await gateway.create_order(
            quote.amount_minor_units,
            settings.STORE_CURRENCY,
            receipt,
            notes={"user_id": user_id, "city_id": str(city.id)},
        )
    except RazorpayError as e:
        raise _gateway_failure(e)

    logger.info(
        "Opened gateway order %s for user %s (%d paise)",
        gateway_order.get("id"),
        user_id,
        quote.amount_minor_units,
    )
    return gateway_order


async def verify_and_place_order(
    db: AsyncSession,
    registry: CatalogRegistry,
    gateway: RazorpayClient,
    *,
    user_id: str,
    razorpay_order_id: str,
    razorpay_payment_id: str,
    razorpay_signature: str,
    shipping_details: dict,
) -> tuple[Order, bool]:
    """Verify a completed payment and turn the cart into a paid order.

    Returns ``(order, created)``; a payment id that was already recorded
    returns the existing order with ``created=False``.
    """
    settings = get_settings()

    if not gateway.key_secret:
        logger.error("Payment verification attempted without RAZORPAY_KEY_SECRET")
        raise TransientInfra("Payment gateway is not configured")

    if not RazorpayClient.verify_signature(
        razorpay_order_id,
        razorpay_payment_id,
        razorpay_signature,
        gateway.key_secret,
    ):
        logger.warning(
            "Rejected payment signature for %s / %s",
            razorpay_order_id,
            razorpay_payment_id,
            extra={"extra_fields": {"user_id": user_id}},
        )
        raise AuthenticityError("Invalid signature.")

    existing = await order_ops.find_order_by_payment_id(db, razorpay_payment_id)
    if existing is not None:
        if existing.user_id != user_id:
            raise ConsistencyFailure("Payment already recorded for another order")
        return existing, False

    expected_amount = None
    if settings.RAZORPAY_VERIFY_AMOUNT:
        try:
            gateway_order = await gateway.fetch_order(razorpay_order_id)
        except RazorpayError as e:
            raise _gateway_failure(e)
        expected_amount = int(gateway_order.get("amount", 0))

        # The intent was priced with the city sent to /payment/order
        intent_city_id = (gateway_order.get("notes") or {}).get("city_id")
        if intent_city_id and not shipping_details.get("city_id"):
            shipping_details = {**shipping_details, "city_id": intent_city_id}

    return await order_ops.materialize_order(
        db,
        registry,
        user_id=user_id,
        shipping_details=shipping_details,
        payment_method=PaymentMethod.RAZORPAY,
        gateway_order_id=razorpay_order_id,
        gateway_payment_id=razorpay_payment_id,
        gateway_signature=razorpay_signature,
        expected_amount_minor_units=expected_amount,
    )
