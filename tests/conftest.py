from __future__ import annotations

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from shoplens.domain.models.order import Order, OrderLine
from shoplens.domain.models.product import Product, SearchCandidate

NOW = datetime(2025, 3, 31, 12, 0, tzinfo=timezone.utc)

_ids = count(1)


def make_product(pid: str, *, category: str | None = "Books", price: float = 10.0,
                 purchase_count: int = 0, name: str | None = None) -> Product:
    return Product(
        id=pid,
        name=name or f"Product {pid}",
        category=category,
        price=price,
        purchase_count=purchase_count,
    )


def make_order(*lines: tuple[str, int], created_at: datetime = NOW - timedelta(days=1)) -> Order:
    return Order(
        id=f"o{next(_ids)}",
        user_id="u1",
        items=[OrderLine(product_id=pid, quantity=qty, unit_price=1.0) for pid, qty in lines],
        created_at=created_at,
    )


def make_candidate(pid: str, sim: float, *, purchase_count: int = 0, price: float = 10.0) -> SearchCandidate:
    return SearchCandidate(
        product=make_product(pid, purchase_count=purchase_count, price=price),
        similarity_score=sim,
    )


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def window_start(now) -> datetime:
    return now - timedelta(days=30)


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis (get/set only)."""

    def __init__(self):
        self.store: dict[str, str] = {}
        self.set_calls: list[tuple[str, int | None]] = []

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.set_calls.append((key, ex))
        return True


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


class FakeCursor:
    """Async-iterable cursor supporting the chained calls the repositories use."""

    def __init__(self, docs):
        self.docs = list(docs)
        self.sort_args = None

    def sort(self, *args):
        self.sort_args = args
        return self

    def limit(self, n):
        self.docs = self.docs[:n]
        return self

    def __aiter__(self):
        return self._iter()

    async def _iter(self):
        for doc in self.docs:
            yield doc


class FakeCollection:
    """`find` honours a top-level `{"_id": {"$in": [...]}}` filter; other filters are recorded only."""

    def __init__(self, docs):
        self.docs = list(docs)
        self.find_calls = []
        self.cursors = []

    def find(self, flt=None, projection=None):
        self.find_calls.append((flt, projection))
        docs = self.docs
        id_filter = (flt or {}).get("_id")
        wanted = id_filter.get("$in") if isinstance(id_filter, dict) else None
        if wanted is not None:
            docs = [d for d in docs if d["_id"] in wanted]
        cursor = FakeCursor(docs)
        self.cursors.append(cursor)
        return cursor
