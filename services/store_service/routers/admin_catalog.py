"""Admin catalog router: product deletion."""

from fastapi import APIRouter, Depends, Request
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.common.rate_limit import admin_limit
from libs.db.session import get_async_db
from services.store_service.catalog import CatalogRegistry, get_catalog_registry
from services.store_service.errors import NotFoundError
from services.store_service.schemas import ProductDeletedResponse
from services.store_service.services import cart_ops
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.delete(
    "/products/{product_type}/{product_id}", response_model=ProductDeletedResponse
)
@admin_limit
async def delete_product(
    request: Request,
    product_type: str,
    product_id: str,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    """Delete a product and strip it from every cart that holds it."""
    product_type, product_id = registry.parse_ref(product_type, product_id)
    product = await registry.find(db, product_type, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    await db.delete(product)
    await db.flush()
    # Commits the delete together with the cart clean-up
    carts_updated = await cart_ops.remove_product_everywhere(
        db, registry, product_type, product_id
    )

    logger.info(
        "Product %s %s deleted by %s",
        product_type.value,
        product_id,
        current_user.user_id,
    )
    return ProductDeletedResponse(
        message="Product deleted successfully", carts_updated=carts_updated
    )
