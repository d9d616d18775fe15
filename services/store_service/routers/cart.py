"""Store cart router: view, add, update and remove cart lines."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.catalog import CatalogRegistry, get_catalog_registry
from services.store_service.routers._helpers import cart_response
from services.store_service.schemas import CartItemCreate, CartItemUpdate, CartResponse
from services.store_service.services import cart_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """Get the current user's cart (an empty cart if none exists yet)."""
    cart = await cart_ops.get_cart(db, current_user.user_id)
    return await cart_response(db, registry, cart)


@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    item_in: CartItemCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """Add a product to the cart, merging with an existing line."""
    cart = await cart_ops.add_item(
        db,
        registry,
        user_id=current_user.user_id,
        product_type=item_in.product_type,
        product_id=item_in.product_id,
        quantity=item_in.quantity,
        with_old_battery=item_in.with_old_battery,
    )
    return await cart_response(db, registry, cart, "Product added to cart")


@router.put("/{product_type}/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_type: str,
    product_id: str,
    item_in: CartItemUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    cart = await cart_ops.update_item_quantity(
        db,
        registry,
        user_id=current_user.user_id,
        product_type=product_type,
        product_id=product_id,
        quantity=item_in.quantity,
    )
    return await cart_response(db, registry, cart, "Cart updated")


@router.delete("/{product_type}/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_type: str,
    product_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    cart = await cart_ops.remove_item(
        db,
        registry,
        user_id=current_user.user_id,
        product_type=product_type,
        product_id=product_id,
    )
    return await cart_response(db, registry, cart, "Product removed from cart")
