# shoplens/api/v1/schemas/search.py
from typing import List, Optional
from pydantic import BaseModel
from shoplens.domain.models.product import RankedResult


class SearchResponseOut(BaseModel):
    query: str
    budget: Optional[float] = None
    method: str  # atlas_search | text_search | regex_fallback
    count: int
    results: List[RankedResult]
