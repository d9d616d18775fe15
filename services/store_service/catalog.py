"""Catalog registry: one place that maps a product type to its table.

Carts and orders only hold ``(product_type, product_id)``. Everything that needs
the live product (cart totals, checkout pricing, response enrichment, product
deletion) resolves it through a :class:`CatalogRegistry`, built once per process
and injected as a FastAPI dependency.
"""

import uuid
from collections import defaultdict
from decimal import Decimal
from functools import lru_cache
from typing import Any, Iterable, Mapping, Optional

from libs.common.currency import to_money
from services.store_service.errors import ValidationError
from services.store_service.models import PRODUCT_MODELS, ProductType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

ProductRef = tuple[ProductType, uuid.UUID]


class CatalogRegistry:
    """Dispatch table from :class:`ProductType` to product model."""

    def __init__(self, models: Mapping[ProductType, type]):
        missing = set(ProductType) - set(models)
        if missing:
            raise ValueError(
                f"No catalog model registered for: {sorted(m.value for m in missing)}"
            )
        self._models = dict(models)

    @staticmethod
    def parse_type(value: Any) -> ProductType:
        try:
            return ProductType(value)
        except ValueError:
            raise ValidationError("Invalid product type")

    @staticmethod
    def parse_id(value: Any) -> uuid.UUID:
        if isinstance(value, uuid.UUID):
            return value
        try:
            return uuid.UUID(str(value))
        except ValueError:
            raise ValidationError("Invalid product id")

    def parse_ref(self, product_type: Any, product_id: Any) -> ProductRef:
        return self.parse_type(product_type), self.parse_id(product_id)

    def model_for(self, product_type: Any) -> type:
        return self._models[self.parse_type(product_type)]

    async def find(
        self, db: AsyncSession, product_type: Any, product_id: Any
    ) -> Optional[Any]:
        """Fetch one product, or ``None`` if it does not exist."""
        product_type, product_id = self.parse_ref(product_type, product_id)
        return await db.get(self._models[product_type], product_id)

    async def find_many(
        self, db: AsyncSession, refs: Iterable[ProductRef]
    ) -> dict[ProductRef, Any]:
        """Fetch many products with one query per family present in ``refs``."""
        ids_by_type: dict[ProductType, set[uuid.UUID]] = defaultdict(set)
        for product_type, product_id in refs:
            ids_by_type[ProductType(product_type)].add(product_id)

        found: dict[ProductRef, Any] = {}
        for product_type, ids in ids_by_type.items():
            model = self._models[product_type]
            result = await db.execute(select(model).where(model.id.in_(ids)))
            for product in result.scalars():
                found[(product_type, product.id)] = product
        return found


def _first_price(product: Any, fields: tuple[str, ...]) -> Decimal:
    for field in fields:
        value = getattr(product, field, None)
        if value is not None:
            return to_money(value)
    return to_money(0)


def cart_unit_price(product: Any) -> Decimal:
    """Unit price used for cart totals: ``selling_price``, then ``mrp``, else 0."""
    return _first_price(product, ("selling_price", "mrp"))


def order_unit_price(product: Any) -> Decimal:
    """Unit price frozen onto order lines: ``price``, ``selling_price``, ``mrp``, else 0."""
    return _first_price(product, ("price", "selling_price", "mrp"))


@lru_cache
def get_catalog_registry() -> CatalogRegistry:
    """Process-wide registry over the six catalog tables."""
    return CatalogRegistry({model.product_type: model for model in PRODUCT_MODELS})
