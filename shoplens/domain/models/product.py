from typing import Annotated, Optional
from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, Field


def _stringify_object_id(v):
    return str(v) if isinstance(v, ObjectId) else v


# Mongo `_id`/reference fields come back as ObjectId, the domain works on strings
IdStr = Annotated[str, BeforeValidator(_stringify_object_id)]


class Product(BaseModel):
    id: IdStr = Field(alias="_id")
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float = Field(ge=0)
    brand: Optional[str] = None
    purchase_count: int = Field(0, ge=0, alias="purchaseCount")
    rating: float = 0
    stock: int = 0

    model_config = {"frozen": True, "populate_by_name": True}  # immuable = safe


class SearchCandidate(BaseModel):
    """A catalog product paired with the raw score of the text index that matched it."""
    product: Product
    similarity_score: float = Field(ge=0, alias="similarityScore")

    model_config = {"frozen": True, "populate_by_name": True}


class RankedResult(BaseModel):
    product: Product
    final_score: float = Field(alias="finalScore")
    similarity_score: float = Field(alias="similarityScore")
    popularity_score: float = Field(alias="popularityScore")
    price_score: float = Field(alias="priceScore")

    model_config = {"frozen": True, "populate_by_name": True}
