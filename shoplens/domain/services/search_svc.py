import time
import logging
from typing import Any, Dict, Optional

from shoplens.domain.repositories.product_search_repo import ProductSearchRepo
from shoplens.domain.services.hybrid_ranker import rank_hybrid_search

logger = logging.getLogger(__name__)


async def search_products_svc(
    db,
    *,
    query: str,
    budget: Optional[float],
    candidate_pool: int,
    limit: int,
) -> Dict[str, Any]:
    """
    Text search over the catalog, re-ranked by similarity + popularity + budget fit.
    The text index provides the candidate pool and its similarity scores;
    the final ordering is the hybrid ranker's.
    """
    t0 = time.perf_counter()
    logger.info("search start query=%r budget=%s pool=%s", query, budget, candidate_pool)

    method, candidates = await ProductSearchRepo(db).search_candidates(query, limit=candidate_pool)
    ranked = rank_hybrid_search(candidates, budget, limit=limit)

    results = [r.model_dump(by_alias=True) for r in ranked]
    logger.info("search done method=%s candidates=%s results=%s total_time=%.3fs", method, len(candidates), len(results), time.perf_counter() - t0)
    return {"query": query, "budget": budget, "method": method, "count": len(results), "results": results}
