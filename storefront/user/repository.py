from typing import Literal, Optional, Union
from fastapi import HTTPException,status
from pydantic import BaseModel
from sqlalchemy import select
from storefront.schema.full_schema import Customer, Merchant, UserRole, Users
from storefront.user.constants import logger


class CustomerAccount(BaseModel):
    kind: Literal["CUSTOMER"] = "CUSTOMER"
    user_id: str
    name: str
    email: str
    customer_id: int
    address: str


class MerchantAccount(BaseModel):
    kind: Literal["MERCHANT"] = "MERCHANT"
    user_id: str
    name: str
    email: str
    merchant_id: int
    company_name: str


Account = Union[CustomerAccount, MerchantAccount]


async def user_by_email(session,email):
    stmt=select(Users).where(Users.email==email)
    res=await session.execute(stmt)
    return res.scalar_one_or_none()


async def user_by_id(session,user_id):
    stmt=select(Users).where(Users.id==user_id)
    res=await session.execute(stmt)
    return res.scalar_one_or_none()


async def account_for_user(session,user) -> Optional[Account]:
    """Attach the single profile row matching the user's role , None if it is missing."""
    if user.role == UserRole.CUSTOMER:
        res=await session.execute(select(Customer).where(Customer.user_id==user.id))
        customer=res.scalar_one_or_none()
        if customer is None:
            return None
        return CustomerAccount(user_id=user.id, name=user.name, email=user.email,
                               customer_id=customer.id, address=customer.address)

    res=await session.execute(select(Merchant).where(Merchant.user_id==user.id))
    merchant=res.scalar_one_or_none()
    if merchant is None:
        return None
    return MerchantAccount(user_id=user.id, name=user.name, email=user.email,
                           merchant_id=merchant.id, company_name=merchant.company_name)


async def load_account(session,user_id) -> Optional[Account]:
    user = await user_by_id(session,user_id)
    if user is None:
        return None
    return await account_for_user(session,user)


def _require_user_id(user_id):
    if user_id is None or not str(user_id).strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="usuarioId is required")
    return str(user_id).strip()


async def require_account(session,user_id) -> Account:
    user_id = _require_user_id(user_id)
    account = await load_account(session,user_id)
    if account is None:
        logger.warning("account.not_found", extra={"usuario_id": user_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return account


async def require_customer(session,user_id) -> CustomerAccount:
    account = await require_account(session,user_id)
    if not isinstance(account, CustomerAccount):
        logger.warning("account.role_mismatch", extra={"usuario_id": account.user_id, "expected": "CUSTOMER"})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only customers can perform this action")
    return account


async def require_merchant(session,user_id) -> MerchantAccount:
    account = await require_account(session,user_id)
    if not isinstance(account, MerchantAccount):
        logger.warning("account.role_mismatch", extra={"usuario_id": account.user_id, "expected": "MERCHANT"})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only merchants can perform this action")
    return account


def account_summary(account: Account) -> dict:
    """`usuario` / `perfil` / `tipoPerfil` block returned by login and signup."""
    usuario = {"id": account.user_id, "name": account.name, "email": account.email, "role": account.kind}
    if isinstance(account, CustomerAccount):
        perfil = {"id": account.customer_id, "address": account.address}
        tipo = "cliente"
    else:
        perfil = {"id": account.merchant_id, "companyName": account.company_name}
        tipo = "lojista"
    return {"usuario": usuario, "perfil": perfil, "tipoPerfil": tipo}
