"""Pydantic schemas for store service.

Requests and responses use camelCase on the wire (``productType``,
``totalAmount``); Python code uses the snake_case field names.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
)
from pydantic.alias_generators import to_camel
from services.store_service.models import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProductType,
)

# Money is Decimal internally and a JSON number on the wire
Money = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CamelResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ============================================================================
# SHIPPING
# ============================================================================


class ShippingInfo(CamelModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: str = Field(..., min_length=1, max_length=20)
    address: str = Field(..., min_length=1)
    city_id: Optional[uuid.UUID] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=10)


# ============================================================================
# PRODUCT SUMMARIES
# ============================================================================


class ProductSummary(CamelResponse):
    """Subset of product fields joined into cart and order views."""

    id: uuid.UUID
    name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    images: Optional[list[str]] = None
    model_name: Optional[str] = None
    warranty: Optional[str] = None
    mrp: Optional[Money] = None
    selling_price: Optional[Money] = None
    price: Optional[Money] = None
    price_with_old_battery: Optional[Money] = None
    price_without_old_battery: Optional[Money] = None


class ProductDetailResponse(CamelModel):
    success: bool = True
    product_type: ProductType
    product: ProductSummary


class ProductDeletedResponse(CamelModel):
    success: bool = True
    message: str
    carts_updated: int


# ============================================================================
# CART SCHEMAS
# ============================================================================


class CartItemCreate(CamelModel):
    # Validated against the catalog registry, not here, so unknown types get
    # the store's own "Invalid product type" message
    product_type: str
    product_id: str
    quantity: Any = 1
    with_old_battery: Optional[bool] = None


class CartItemUpdate(CamelModel):
    quantity: Any


class CartItemResponse(CamelResponse):
    product_type: ProductType
    product_id: uuid.UUID
    quantity: int
    with_old_battery: bool = False
    product: Optional[ProductSummary] = None


class CartResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    id: Optional[uuid.UUID] = None
    items: list[CartItemResponse] = []
    total_amount: Money = Decimal("0")


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class CheckoutRequest(CamelModel):
    """COD checkout body."""

    shipping_info: ShippingInfo = Field(
        ...,
        validation_alias=AliasChoices(
            "shippingInfo", "shippingDetails", "shipping_info"
        ),
    )
    payment_method: Literal["cod"] = "cod"


class StatusUpdateRequest(CamelModel):
    status: OrderStatus
    notes: Optional[str] = None
    delivery_date: Optional[date] = None


class OrderItemResponse(CamelResponse):
    product_type: ProductType
    product_id: uuid.UUID
    product_name: Optional[str] = None
    quantity: int
    price: Money
    total_price: Money
    with_old_battery: Optional[bool] = None
    product: Optional[ProductSummary] = None


class PricingResponse(CamelResponse):
    subtotal: Money
    delivery_charge: Money
    tax: Money
    total: Money


class PaymentInfoResponse(CamelResponse):
    method: PaymentMethod
    status: PaymentStatus
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    amount_paid: Optional[Money] = None


class OrderResponse(CamelModel):
    id: uuid.UUID
    order_number: str
    user_id: str
    items: list[OrderItemResponse]
    shipping_details: dict
    payment_info: PaymentInfoResponse
    pricing: PricingResponse
    status: OrderStatus
    notes: Optional[str] = None
    delivery_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime


class OrderDetailResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None
    order: OrderResponse


class OrderCreatedData(CamelModel):
    order_id: uuid.UUID
    order_number: str
    total: Money


class OrderCreatedResponse(CamelModel):
    success: bool = True
    message: str
    data: OrderCreatedData


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class OrderListResponse(CamelModel):
    success: bool = True
    orders: list[OrderResponse]
    pagination: Pagination


# ============================================================================
# PAYMENT SCHEMAS
# ============================================================================


class RazorpayKeyResponse(CamelModel):
    success: bool = True
    key: str


class PaymentOrderRequest(CamelModel):
    city_id: Optional[uuid.UUID] = None


class PaymentOrderResponse(CamelModel):
    success: bool = True
    # Gateway order handle, passed through untouched
    order: dict
    key: str


class VerifyPaymentRequest(BaseModel):
    """Checkout proof posted by the Razorpay client widget."""

    model_config = ConfigDict(populate_by_name=True)

    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)
    shipping_info: ShippingInfo = Field(
        ...,
        validation_alias=AliasChoices(
            "shippingInfo", "shippingDetails", "shipping_info"
        ),
    )


# ============================================================================
# CITY SCHEMAS
# ============================================================================


class CityResponse(CamelResponse):
    id: uuid.UUID
    name: str
    state: str
    delivery_charge: Money
    estimated_delivery_days: str


class CityListResponse(CamelModel):
    success: bool = True
    cities: list[CityResponse]
