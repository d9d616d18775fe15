"""Store catalog router: delivery cities and product lookups."""

from fastapi import APIRouter, Depends
from libs.db.session import get_async_db
from services.store_service.catalog import CatalogRegistry, get_catalog_registry
from services.store_service.errors import NotFoundError
from services.store_service.models import City
from services.store_service.routers._helpers import product_summary
from services.store_service.schemas import (
    CityListResponse,
    CityResponse,
    ProductDetailResponse,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["catalog"])


@router.get("/cities", response_model=CityListResponse)
async def list_cities(
    db: AsyncSession = Depends(get_async_db),
):
    """List active delivery cities with their delivery charge."""
    query = (
        select(City)
        .where(City.is_active.is_(True))
        .order_by(City.state, City.name)
    )
    result = await db.execute(query)
    return CityListResponse(
        cities=[CityResponse.model_validate(city) for city in result.scalars().all()]
    )


@router.get(
    "/products/{product_type}/{product_id}", response_model=ProductDetailResponse
)
async def get_product(
    product_type: str,
    product_id: str,
    db: AsyncSession = Depends(get_async_db),
    registry: CatalogRegistry = Depends(get_catalog_registry),
):
    product_type, product_id = registry.parse_ref(product_type, product_id)
    product = await registry.find(db, product_type, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return ProductDetailResponse(
        product_type=product_type, product=product_summary(product)
    )
