# shoplens/domain/repositories/product_search_repo.py
from __future__ import annotations
import logging
import re
from typing import Any, Dict, Iterable, List, NamedTuple
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import OperationFailure
from shoplens.domain.models.product import SearchCandidate
from shoplens.domain.repositories.product_repo import PRODUCT_PROJECTION, parse_product

logger = logging.getLogger(__name__)

SEARCH_PATHS = ["name", "description", "brand"]

# which tier answered, echoed to API clients
METHOD_ATLAS = "atlas_search"
METHOD_TEXT = "text_search"
METHOD_REGEX = "regex_fallback"


class SearchOutcome(NamedTuple):
    method: str
    candidates: List[SearchCandidate]


class ProductSearchRepo:
    """
    Fuzzy/lexical product search producing scored candidates.

    Tiers, first non-empty wins:
      1) Atlas Search `$search` with fuzzy text matching (typos: "leptop" -> "laptop")
      2) classic `$text` index (stemming, no typo tolerance)
      3) case-insensitive substring match on name/description/brand, similarity 0
    """

    TEXT_INDEX = "text_index"

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: str = "products"):
        self.col: AsyncIOMotorCollection = db[collection_name]

    # ---------- Utils ----------
    @staticmethod
    def _to_candidates(docs: Iterable[Dict[str, Any]]) -> List[SearchCandidate]:
        out: List[SearchCandidate] = []
        for doc in docs:
            product = parse_product(doc)
            if product is None:
                continue
            score = float(doc.get("score") or 0.0)
            out.append(SearchCandidate(product=product, similarity_score=max(score, 0.0)))
        return out

    # ---------- Atlas Search ----------
    async def atlas_fuzzy_search(self, query: str, limit: int) -> List[Dict[str, Any]]:
        pipeline: List[Dict[str, Any]] = [
            {
                "$search": {
                    "index": self.TEXT_INDEX,
                    "text": {
                        "query": query,
                        "path": SEARCH_PATHS,
                        "fuzzy": {"maxEdits": 2, "prefixLength": 1},
                    },
                }
            },
            {"$limit": limit},
            {"$project": {**PRODUCT_PROJECTION, "score": {"$meta": "searchScore"}}},
        ]
        cursor = self.col.aggregate(pipeline)
        return [doc async for doc in cursor]

    # ---------- $text index ----------
    async def text_search(self, query: str, limit: int) -> List[Dict[str, Any]]:
        cursor = (
            self.col.find(
                {"$text": {"$search": query}},
                {**PRODUCT_PROJECTION, "score": {"$meta": "textScore"}},
            )
            .sort([("score", {"$meta": "textScore"})])
            .limit(limit)
        )
        return [doc async for doc in cursor]

    # ---------- Regex fallback ----------
    async def regex_search(self, query: str, limit: int) -> List[Dict[str, Any]]:
        # escaped: the query is user input, not a pattern
        pattern = {"$regex": re.escape(query), "$options": "i"}
        cursor = self.col.find(
            {"$or": [{path: pattern} for path in SEARCH_PATHS]},
            PRODUCT_PROJECTION,
        ).limit(limit)
        return [doc async for doc in cursor]

    async def search_candidates(self, query: str, limit: int = 100) -> SearchOutcome:
        """Candidates from the first tier that returns anything, tagged with that tier."""
        docs: List[Dict[str, Any]] = []
        method = METHOD_ATLAS

        try:
            docs = await self.atlas_fuzzy_search(query, limit)
            logger.info("Atlas $search returned %s results for query=%r", len(docs), query)
        except OperationFailure as e:
            logger.warning("Atlas $search unavailable, falling back to $text: %s", e)

        if not docs:
            method = METHOD_TEXT
            try:
                docs = await self.text_search(query, limit)
                logger.info("$text search returned %s results for query=%r", len(docs), query)
            except OperationFailure as e:
                logger.warning("$text search failed (missing text index?), falling back to regex: %s", e)

        if not docs:
            method = METHOD_REGEX
            docs = await self.regex_search(query, limit)
            logger.info("regex fallback returned %s results for query=%r", len(docs), query)

        return SearchOutcome(method, self._to_candidates(docs))
