from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CartItemInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    product_id: Optional[Any] = Field(None, alias="productId")
    id: Optional[Any] = None            # older clients send the product id as `id`
    quantity: Optional[Any] = 1
    selected_size: Optional[str] = Field(None, alias="selectedSize")
    selected_color: Optional[str] = Field(None, alias="selectedColor")


class CartReplaceIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="usuarioId")
    items: Optional[List[CartItemInput]] = None
