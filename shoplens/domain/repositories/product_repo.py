# shoplens/domain/repositories/product_repo.py

from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from shoplens.domain.models.product import Product

logger = logging.getLogger(__name__)

PRODUCT_PROJECTION = {
    "name": 1,
    "description": 1,
    "category": 1,
    "price": 1,
    "brand": 1,
    "purchaseCount": 1,
    "rating": 1,
    "stock": 1,
}


def to_object_id(value: Any) -> Any:
    """ObjectId for valid 24-hex strings, the value untouched otherwise."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def parse_product(doc: Dict[str, Any]) -> Optional[Product]:
    try:
        return Product.model_validate(doc)
    except ValidationError as e:
        logger.warning("Skipping malformed product _id=%s: %s", doc.get("_id"), e.errors()[:3])
        return None


class ProductRepo:
    """Product repository backed by the 'products' collection."""

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col = db[collection_name]

    async def get_lookup(self, ids: Iterable[str]) -> Dict[str, Product]:
        """
        Batch fetch products by id, keyed by string id.
        Ids that do not exist (or whose document is malformed) are simply absent.
        """
        wanted: List[Any] = [to_object_id(i) for i in dict.fromkeys(ids)]
        if not wanted:
            return {}
        cursor = self.col.find({"_id": {"$in": wanted}}, PRODUCT_PROJECTION)
        lookup: Dict[str, Product] = {}
        async for doc in cursor:
            product = parse_product(doc)
            if product:
                lookup[product.id] = product
        return lookup
