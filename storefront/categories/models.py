from typing import Optional
from pydantic import BaseModel, Field


class CategoryCreateIn(BaseModel):
    nome: Optional[str] = Field(None, examples=["Camisetas"])
    descricao: Optional[str] = None
