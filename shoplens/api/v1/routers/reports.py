# shoplens/api/v1/routers/reports.py
from datetime import datetime, timezone
from typing import List, Optional
import logging
import time

from fastapi import APIRouter, Depends, Query

from shoplens.api.deps import mongo_db, redis_dep, settings_dep
from shoplens.domain.models.report import CategoryLeaderboard
from shoplens.core.config import Settings
from shoplens.domain.services.top_products_svc import get_top_products_report_svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/top-products", response_model=List[CategoryLeaderboard])
async def top_products_by_category(
    days: Optional[int] = Query(None, ge=1, le=365, description="Trailing window in days (default from settings)"),
    db = Depends(mongo_db),
    redis = Depends(redis_dep),
    settings: Settings = Depends(settings_dep),
):
    """
    Top 5 products (by units purchased) of every category over the trailing window.
    Categories are sorted A-Z; categories without sales are omitted.
    """
    window_days = days or settings.top_products_window_days
    logger.info("Request: top_products_by_category days=%s", window_days)
    t0 = time.perf_counter()

    result = await get_top_products_report_svc(
        db,
        redis,
        now=datetime.now(timezone.utc),
        window_days=window_days,
        limit_per_category=settings.top_products_per_category,
    )

    logger.info("Response: top_products_by_category categories=%s in %.4fs", len(result), time.perf_counter() - t0)
    return result
