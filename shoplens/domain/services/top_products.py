"""
Top products per category over a trailing window of orders.

In-process version of the report pipeline
    match window -> unwind items -> group by product -> lookup product
    -> group by category -> sort -> slice top K -> sort by category
with each stage as its own function so it can be tested on its own.
Nothing here reads the clock or touches the database: the caller passes
the orders, the product lookup and the window bounds.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Tuple

from shoplens.core.errors import InvalidPrecondition
from shoplens.domain.models.order import Order
from shoplens.domain.models.product import Product
from shoplens.domain.models.report import CategoryLeaderboard, LeaderboardEntry
from shoplens.domain.services.constants import TOP_PRODUCTS_PER_CATEGORY
from shoplens.domain.services.ordering import as_utc, sort_desc, take

logger = logging.getLogger(__name__)


class ProductSales(NamedTuple):
    product_id: str
    name: str
    category: str
    total_purchased: int


TieBreak = Callable[[ProductSales], Any]


def filter_orders_in_window(orders: Iterable[Order], window_start: datetime, now: datetime) -> List[Order]:
    """Orders created in [window_start, now], both bounds inclusive."""
    start, end = as_utc(window_start), as_utc(now)
    if start > end:
        raise InvalidPrecondition(f"window_start {window_start.isoformat()} is after now {now.isoformat()}")
    return [o for o in orders if start <= as_utc(o.created_at) <= end]


def flatten_order_lines(orders: Iterable[Order]) -> Iterator[Tuple[str, int]]:
    for order in orders:
        for line in order.items:
            yield line.product_id, line.quantity


def sum_quantities_by_product(
    lines: Iterable[Tuple[str, int]],
    products: Mapping[str, Product],
) -> Dict[str, int]:
    """
    Units per product id, keyed in discovery order.
    Lines pointing at products missing from the lookup are dropped.
    """
    totals: Dict[str, int] = {}
    dropped = 0
    for product_id, quantity in lines:
        if product_id not in products:
            dropped += 1
            continue
        totals[product_id] = totals.get(product_id, 0) + quantity
    if dropped:
        logger.debug("top_products dropped %s order lines with unknown product ids", dropped)
    return totals


def join_product_details(totals: Mapping[str, int], products: Mapping[str, Product]) -> List[ProductSales]:
    records: List[ProductSales] = []
    for product_id, total in totals.items():
        product = products[product_id]
        if product.category is None:
            logger.debug("top_products product_id=%s has no category, skipped", product_id)
            continue
        records.append(ProductSales(product_id, product.name, product.category, total))
    return records


def group_by_category(records: Iterable[ProductSales]) -> Dict[str, List[ProductSales]]:
    groups: Dict[str, List[ProductSales]] = {}
    for rec in records:
        groups.setdefault(rec.category, []).append(rec)
    return groups


def rank_within_category(records: Iterable[ProductSales], tie_break: Optional[TieBreak] = None) -> List[ProductSales]:
    return sort_desc(records, key=lambda r: r.total_purchased, tie_break=tie_break)


def aggregate_top_products_by_category(
    orders: Iterable[Order],
    products: Mapping[str, Product],
    window_start: datetime,
    now: datetime,
    *,
    limit_per_category: int = TOP_PRODUCTS_PER_CATEGORY,
    tie_break: Optional[TieBreak] = None,
) -> List[CategoryLeaderboard]:
    """
    Best sellers of each category for orders created in [window_start, now].

    Leaderboards are sorted by category name; inside a category products are
    sorted by units purchased, highest first, and capped at
    `limit_per_category`. Equal totals keep the order in which products were
    first seen in `orders`, unless `tie_break` is given.
    """
    if limit_per_category < 1:
        raise InvalidPrecondition(f"limit_per_category must be >= 1, got {limit_per_category}")

    in_window = filter_orders_in_window(orders, window_start, now)
    totals = sum_quantities_by_product(flatten_order_lines(in_window), products)
    groups = group_by_category(join_product_details(totals, products))

    leaderboards: List[CategoryLeaderboard] = []
    for category in sorted(groups):
        top = take(rank_within_category(groups[category], tie_break), limit_per_category)
        leaderboards.append(
            CategoryLeaderboard(
                category=category,
                top_products=[
                    LeaderboardEntry(product_id=r.product_id, name=r.name, total_purchased=r.total_purchased)
                    for r in top
                ],
            )
        )

    logger.debug(
        "top_products aggregated in_window=%s products=%s categories=%s",
        len(in_window), len(totals), len(leaderboards),
    )
    return leaderboards
