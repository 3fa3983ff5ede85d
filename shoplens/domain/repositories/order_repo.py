# shoplens/domain/repositories/order_repo.py

from __future__ import annotations
import logging
from datetime import datetime
from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from shoplens.domain.models.order import Order

logger = logging.getLogger(__name__)


class OrderRepo:
    """
    Order repository backed by the 'orders' collection.
    Documents embed their line items: {user, items: [{product, quantity, price}], totalCost, createdAt}.
    """

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "orders"):
        self.col = db[collection_name]

    async def find_created_between(self, start: datetime, end: datetime) -> List[Order]:
        """
        Orders with start <= createdAt <= end, oldest first.
        Uses the {createdAt: -1} index. Documents that do not validate are skipped.
        """
        cursor = self.col.find(
            {"createdAt": {"$gte": start, "$lte": end}},
            {"user": 1, "items": 1, "totalCost": 1, "createdAt": 1},
        ).sort("createdAt", 1)

        orders: List[Order] = []
        async for doc in cursor:
            try:
                orders.append(Order.model_validate(doc))
            except ValidationError as e:
                logger.warning("Skipping malformed order _id=%s: %s", doc.get("_id"), e.errors()[:3])
        return orders
