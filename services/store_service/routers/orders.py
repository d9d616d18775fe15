"""Store orders router: COD checkout, order history, admin status updates."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.common.rate_limit import admin_limit
from libs.db.session import get_async_db
from services.store_service.catalog import CatalogRegistry, get_catalog_registry
from services.store_service.routers._helpers import order_responses
from services.store_service.schemas import (
    CheckoutRequest,
    OrderCreatedData,
    OrderCreatedResponse,
    OrderDetailResponse,
    OrderListResponse,
    Pagination,
    StatusUpdateRequest,
)
from services.store_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/orders", tags=["orders"])


async def _detail(
    db: AsyncSession,
    registry: CatalogRegistry,
    order,
    message: Optional[str] = None,
) -> OrderDetailResponse:
    [order_out] = await order_responses(db, registry, [order])
    return OrderDetailResponse(message=message, order=order_out)


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post(
    "",
    response_model=OrderCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_cod_order(
    checkout: CheckoutRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """Place a cash-on-delivery order from the current cart."""
    order = await order_ops.place_cod_order(
        db,
        registry,
        user_id=current_user.user_id,
        shipping_details=checkout.shipping_info.model_dump(mode="json"),
    )
    return OrderCreatedResponse(
        message="Order created successfully",
        data=OrderCreatedData(
            order_id=order.id,
            order_number=order.order_number,
            total=order.total,
        ),
    )


# ============================================================================
# CUSTOMER ORDERS
# ============================================================================


@router.get("/user", response_model=OrderListResponse)
async def list_my_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """List the current user's orders, newest first."""
    orders, total = await order_ops.list_orders_for_user(
        db, current_user.user_id, page=page, limit=limit
    )
    return OrderListResponse(
        orders=await order_responses(db, registry, orders),
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=order_ops.page_count(total, limit),
        ),
    )


@router.get("/details/{order_id}", response_model=OrderDetailResponse)
async def get_order_details(
    order_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """Order detail; admins may read any order, customers only their own."""
    order = await order_ops.get_order_for_user(
        db,
        order_id,
        user_id=None if current_user.is_admin else current_user.user_id,
    )
    return await _detail(db, registry, order)


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_my_order(
    order_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    order = await order_ops.get_order_for_user(
        db, order_id, user_id=current_user.user_id
    )
    return await _detail(db, registry, order)


# ============================================================================
# ADMIN
# ============================================================================


@router.get("", response_model=OrderListResponse)
@admin_limit
async def list_orders(
    request: Request,
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """List all orders (admin), filtered by status and search text."""
    orders, total = await order_ops.list_all_orders(
        db, status=status_filter, search=search, page=page, limit=limit
    )
    return OrderListResponse(
        orders=await order_responses(db, registry, orders),
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=order_ops.page_count(total, limit),
        ),
    )


@router.put("/{order_id}/status", response_model=OrderDetailResponse)
@admin_limit
async def update_order_status(
    request: Request,
    order_id: str,
    update_in: StatusUpdateRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """Overwrite an order's status (admin)."""
    order = await order_ops.update_order_status(
        db,
        order_id,
        status=update_in.status,
        notes=update_in.notes,
        delivery_date=update_in.delivery_date,
    )
    return await _detail(db, registry, order, "Order status updated successfully")
