from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class OrderCreateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="usuarioId")
    shipping_address: Optional[Dict[str, Any]] = Field(None, alias="enderecoEntrega")


class PaymentIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: Optional[Any] = Field(None, alias="valor")
    payment_type: Optional[str] = Field(None, alias="tipoPagamento")
    shipping_fee: Optional[Any] = Field(None, alias="frete")


class OrderPatchIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="usuarioId")
    action: Optional[str] = None
    payment: Optional[PaymentIn] = None
