import time
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List

from shoplens.core.config import get_settings
from shoplens.domain.repositories.order_repo import OrderRepo
from shoplens.domain.repositories.product_repo import ProductRepo
from shoplens.domain.services.top_products import aggregate_top_products_by_category
from shoplens.utils.cache import cache_get, cache_key, cache_set

logger = logging.getLogger(__name__)


async def get_top_products_report_svc(
    db,
    redis,
    *,
    now: datetime,
    window_days: int,
    limit_per_category: int,
) -> List[Dict[str, Any]]:
    """
    Top sellers per category over the last `window_days` days, JSON-ready.

    Flow: Redis cache -> orders in [now - window_days, now] -> batch product
    lookup for the referenced ids -> in-process aggregation -> cache.
    `now` comes from the caller so the aggregation itself never reads the clock.

    The cache key holds the window length and K but not `now`: for up to
    `top_products_cache_ttl` seconds a later call is served the report
    computed for the earlier window end.
    """
    start_time = time.perf_counter()
    logger.info("top_products start window_days=%s limit_per_category=%s", window_days, limit_per_category)
    settings = get_settings()

    key = cache_key("top_products", {
        "shape": "category_top_products_v1",
        "window_days": window_days,
        "limit_per_category": limit_per_category,
    })
    cached = await cache_get(redis, key)
    if isinstance(cached, list):
        logger.info("top_products cache_hit key=%s categories=%s", key, len(cached))
        return cached
    logger.info("top_products cache_miss key=%s", key)

    window_start = now - timedelta(days=window_days)

    db_t0 = time.perf_counter()
    orders = await OrderRepo(db).find_created_between(window_start, now)
    product_ids = {line.product_id for order in orders for line in order.items}
    products = await ProductRepo(db).get_lookup(product_ids)
    logger.info(
        "top_products db_ok orders=%s referenced=%s resolved=%s db_time=%.3fs",
        len(orders), len(product_ids), len(products), time.perf_counter() - db_t0,
    )

    leaderboards = aggregate_top_products_by_category(
        orders,
        products,
        window_start,
        now,
        limit_per_category=limit_per_category,
    )
    result = [lb.model_dump(by_alias=True) for lb in leaderboards]

    await cache_set(redis, key, result, ex=settings.top_products_cache_ttl)

    logger.info("top_products done categories=%s total_time=%.3fs", len(result), time.perf_counter() - start_time)
    return result
