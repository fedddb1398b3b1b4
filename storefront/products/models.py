from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class ProductCreateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="usuarioId")
    name: Optional[str] = Field(None, alias="nome")
    price: Optional[Any] = Field(None, alias="preco")
    category_id: Optional[Any] = Field(None, alias="categoriaId")
    description: Optional[str] = Field(None, alias="descricao")
    images: Optional[Any] = Field(None, alias="imagens")
    colors: Optional[Any] = Field(None, alias="cores")
    sizes: Optional[Any] = Field(None, alias="tamanhos")
    stock_by_variant: Optional[Any] = Field(None, alias="estoquePorVariante")
    stock: Optional[Any] = Field(None, alias="estoque")


class ProductUpdateIn(ProductCreateIn):
    product_id: Optional[Any] = Field(None, alias="produtoId")
    active: Optional[Any] = Field(None, alias="ativo")


class ProductDeleteIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="usuarioId")
    product_id: Optional[Any] = Field(None, alias="produtoId")
