from typing import  Optional
from pydantic import BaseModel, ConfigDict, Field


class SignupIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(None, alias="fullName", examples=["Maria Silva"])
    email: Optional[str] = Field(None, examples=["maria@example.com"])
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(None, alias="confirmPassword")
    account_type: Optional[str] = Field(None, alias="accountType", examples=["cliente", "lojista"])
    endereco: Optional[str] = None
    empresa: Optional[str] = None

class SignIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
