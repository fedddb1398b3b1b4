from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Query
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.cart.models import CartReplaceIn
from storefront.cart.services import get_customer_cart, replace_customer_cart
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.user.repository import require_customer
from storefront.cart.constants import logger

carts_router = APIRouter()


@carts_router.get("/list")
async def get_cart(usuario_id: Optional[str] = Query(None, alias="usuarioId"),
                   session: AsyncSession = Depends(get_session)):

    customer = await require_customer(session,usuario_id)
    view = await get_customer_cart(session,customer)
    return success_response({"message": "Cart loaded", **view})


# the whole cart is replaced on every save , last write wins
@carts_router.post("/create")
async def save_cart(payload: CartReplaceIn, session: AsyncSession = Depends(get_session)):

    if not payload.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="usuarioId is required")
    if payload.items is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="items is required and must be a list")

    customer = await require_customer(session,payload.user_id)
    logger.info("cart.replace.attempt", extra={"customer_id": customer.customer_id, "sent": len(payload.items)})

    view = await replace_customer_cart(session,customer,payload.items)
    return success_response({"message": "Cart saved", **view})
