# shoplens/api/v1/routers/search.py
from typing import Optional
import logging
import math
import time

from fastapi import APIRouter, Depends, HTTPException, Query

from shoplens.api.deps import mongo_db, settings_dep
from shoplens.api.v1.schemas.search import SearchResponseOut
from shoplens.core.config import Settings
from shoplens.domain.services.search_svc import search_products_svc

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


def parse_budget(raw: Optional[str]) -> Optional[float]:
    """
    Lenient budget parsing: anything that is not a finite number counts as
    "no budget". Negative budgets are a client error.
    """
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.debug("Ignoring malformed budget=%r", raw)
        return None
    if not math.isfinite(value):
        logger.debug("Ignoring non-finite budget=%r", raw)
        return None
    if value < 0:
        raise HTTPException(status_code=400, detail="budget must be >= 0")
    return value


@router.get("/products/search", response_model=SearchResponseOut)
async def search_products(
    query: Optional[str] = Query(None, description="Free-text query (name, description, brand)"),
    budget: Optional[str] = Query(None, description="Target price; products priced near it rank higher"),
    db = Depends(mongo_db),
    settings: Settings = Depends(settings_dep),
):
    """
    Fuzzy product search re-ranked by 0.4 * similarity + 0.4 * ln(1 + purchases) + 0.2 * budget fit.
    Returns at most 20 products, best first.
    """
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="Query parameter is required")
    query = query.strip()
    parsed_budget = parse_budget(budget)

    logger.info("Request: search_products query=%r budget=%s", query, parsed_budget)
    t0 = time.perf_counter()

    res = await search_products_svc(
        db,
        query=query,
        budget=parsed_budget,
        candidate_pool=settings.search_candidate_pool,
        limit=settings.search_result_limit,
    )

    logger.info("Response: search_products count=%s in %.4fs", res["count"], time.perf_counter() - t0)
    return res
