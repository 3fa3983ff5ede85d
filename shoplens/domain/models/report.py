from typing import List
from pydantic import BaseModel, Field


class LeaderboardEntry(BaseModel):
    product_id: str = Field(alias="productId")
    name: str
    total_purchased: int = Field(ge=1, alias="totalPurchased")

    model_config = {"frozen": True, "populate_by_name": True}


class CategoryLeaderboard(BaseModel):
    category: str
    top_products: List[LeaderboardEntry] = Field(alias="topProducts")

    model_config = {"frozen": True, "populate_by_name": True}
