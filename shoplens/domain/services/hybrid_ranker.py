import logging
import math
from typing import Iterable, List, Optional

from shoplens.core.errors import InvalidPrecondition
from shoplens.domain.models.product import RankedResult, SearchCandidate
from shoplens.domain.services.constants import (
    PRICE_SCALE_RATIO,
    SEARCH_RESULT_LIMIT,
    W_POPULARITY,
    W_PRICE,
    W_SIMILARITY,
)
from shoplens.domain.services.ordering import sort_desc, take

logger = logging.getLogger(__name__)


def _check_budget(budget: Optional[float]) -> None:
    # Parsing/clamping belongs to the HTTP layer; anything odd here is a caller bug
    if budget is None:
        return
    if not math.isfinite(budget):
        raise InvalidPrecondition(f"budget must be a finite number, got {budget!r}")
    if budget < 0:
        raise InvalidPrecondition(f"budget must be >= 0, got {budget!r}")


def popularity_score(purchase_count: int) -> float:
    """ln(1 + purchases): 0 for unsold products, grows slowly for best sellers."""
    return math.log1p(purchase_count)


def price_score(price: float, budget: Optional[float]) -> float:
    """
    Gaussian closeness of `price` to `budget`, 1.0 at the budget and
    falling towards 0 on both sides, with sigma = half the budget.
    No budget (or a zero budget) scores 0 for every product.
    """
    if budget is None or budget == 0:
        return 0.0
    scale = PRICE_SCALE_RATIO * budget
    if scale == 0:
        # subnormal budgets underflow to a zero-width curve
        return 1.0 if price == budget else 0.0
    # float `*` saturates to inf where `**` raises OverflowError; exp(-inf) == 0.0
    z = (price - budget) / scale
    return math.exp(-0.5 * z * z)


def composite_score(similarity: float, popularity: float, price: float) -> float:
    return W_SIMILARITY * similarity + W_POPULARITY * popularity + W_PRICE * price


def score_candidate(candidate: SearchCandidate, budget: Optional[float]) -> RankedResult:
    sim = candidate.similarity_score
    if not math.isfinite(sim) or sim < 0:
        raise InvalidPrecondition(
            f"similarity score must be a finite number >= 0, got {sim!r} for product_id={candidate.product.id}"
        )
    pop = popularity_score(candidate.product.purchase_count)
    prc = price_score(candidate.product.price, budget)
    return RankedResult(
        product=candidate.product,
        final_score=composite_score(sim, pop, prc),
        similarity_score=sim,
        popularity_score=pop,
        price_score=prc,
    )


def rank_hybrid_search(
    candidates: Iterable[SearchCandidate],
    budget: Optional[float] = None,
    *,
    limit: int = SEARCH_RESULT_LIMIT,
) -> List[RankedResult]:
    """
    Rank text-search candidates by a blend of text similarity, popularity
    and closeness to the budget.

    `budget` must be None or a finite number >= 0, otherwise
    InvalidPrecondition is raised. Results are sorted by final score,
    highest first; equal scores keep the candidates' input order.
    """
    _check_budget(budget)
    scored = [score_candidate(c, budget) for c in candidates]
    ranked = take(sort_desc(scored, key=lambda r: r.final_score), limit)
    logger.debug("hybrid_rank candidates=%s budget=%s returned=%s", len(scored), budget, len(ranked))
    return ranked
