"""Razorpay payment router: publishable key, gateway order, verification."""

from fastapi import APIRouter, Depends, Request, Response, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.rate_limit import payment_limit
from libs.db.session import get_async_db
from services.store_service.catalog import CatalogRegistry, get_catalog_registry
from services.store_service.razorpay_client import RazorpayClient, get_razorpay_client
from services.store_service.routers._helpers import order_responses
from services.store_service.schemas import (
    OrderDetailResponse,
    PaymentOrderRequest,
    PaymentOrderResponse,
    RazorpayKeyResponse,
    VerifyPaymentRequest,
)
from services.store_service.services import payment_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payment", tags=["payment"])


@router.get("/key", response_model=RazorpayKeyResponse)
async def get_razorpay_key(
    _user: AuthUser = Depends(get_current_user),
    gateway: RazorpayClient = Depends(get_razorpay_client),
):
    """Publishable key for the client-side checkout widget."""
    return RazorpayKeyResponse(key=gateway.key_id)


@router.post("/order", response_model=PaymentOrderResponse)
@payment_limit
async def create_payment_order(
    request: Request,
    body: PaymentOrderRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
    gateway: RazorpayClient = Depends(get_razorpay_client),
):
    """Open a Razorpay order for the cart total plus the city's delivery charge."""
    gateway_order = await payment_ops.create_payment_intent(
        db,
        registry,
        gateway,
        user_id=current_user.user_id,
        city_id=body.city_id,
    )
    return PaymentOrderResponse(order=gateway_order, key=gateway.key_id)


@router.post(
    "/verify",
    response_model=OrderDetailResponse,
    status_code=status.HTTP_201_CREATED,
)
@payment_limit
async def verify_payment(
    request: Request,
    response: Response,
    body: VerifyPaymentRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
    gateway: RazorpayClient = Depends(get_razorpay_client),
):
    """Verify the checkout signature and place the paid order.

    Resubmitting an already-recorded payment returns its order with 200.
    """
    order, created = await payment_ops.verify_and_place_order(
        db,
        registry,
        gateway,
        user_id=current_user.user_id,
        razorpay_order_id=body.razorpay_order_id,
        razorpay_payment_id=body.razorpay_payment_id,
        razorpay_signature=body.razorpay_signature,
        shipping_details=body.shipping_info.model_dump(mode="json"),
    )

    if not created:
        response.status_code = status.HTTP_200_OK

    [order_out] = await order_responses(db, registry, [order])
    return OrderDetailResponse(
        message=(
            "Order placed successfully"
            if created
            else "Order already placed for this payment"
        ),
        order=order_out,
    )
