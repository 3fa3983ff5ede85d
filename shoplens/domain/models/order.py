from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from shoplens.domain.models.product import IdStr


class OrderLine(BaseModel):
    product_id: IdStr = Field(alias="product")
    quantity: int = Field(ge=1)
    unit_price: float = Field(alias="price")

    model_config = {"frozen": True, "populate_by_name": True}


class Order(BaseModel):
    id: IdStr = Field(alias="_id")
    user_id: Optional[IdStr] = Field(None, alias="user")
    items: List[OrderLine] = []
    created_at: datetime = Field(alias="createdAt")
    total_cost: Optional[float] = Field(None, alias="totalCost")

    model_config = {"frozen": True, "populate_by_name": True}
