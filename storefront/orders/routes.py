from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Query
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.orders.constants import CONFIRM_PAYMENT_ACTION, logger
from storefront.orders.models import OrderCreateIn, OrderPatchIn
from storefront.orders.services import confirm_payment, create_order_from_cart, list_customer_orders, order_detail
from storefront.user.repository import require_customer

orders_router = APIRouter()


@orders_router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreateIn, session: AsyncSession = Depends(get_session)):

    customer = await require_customer(session,payload.user_id)
    logger.info("order.create.attempt", extra={"customer_id": customer.customer_id})

    order = await create_order_from_cart(session,customer,payload.shipping_address)

    logger.info("order.create.success", extra={"order_id": order["id"], "total": order["totalAmount"]})
    return success_response({"message": "Order created", "order": order}, status_code=status.HTTP_201_CREATED)


@orders_router.get("/list")
async def get_orders(usuario_id: Optional[str] = Query(None, alias="usuarioId"),
                     session: AsyncSession = Depends(get_session)):

    customer = await require_customer(session,usuario_id)
    orders = await list_customer_orders(session,customer)
    return success_response({"message": "Orders loaded", "orders": orders, "total": len(orders)})


@orders_router.get("/{order_id}")
async def get_order(order_id: int, usuario_id: Optional[str] = Query(None, alias="usuarioId"),
                    session: AsyncSession = Depends(get_session)):

    customer = await require_customer(session,usuario_id)
    order = await order_detail(session,customer,order_id)
    return success_response({"message": "Order loaded", "order": order})


@orders_router.patch("/{order_id}")
async def patch_order(order_id: int, payload: OrderPatchIn, session: AsyncSession = Depends(get_session)):

    if payload.action != CONFIRM_PAYMENT_ACTION:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported action: {payload.action}")

    customer = await require_customer(session,payload.user_id)
    logger.info("payment.confirm.attempt", extra={"order_id": order_id, "customer_id": customer.customer_id})

    result = await confirm_payment(session,customer,order_id,payload.payment)

    logger.info("payment.confirm.success", extra={"order_id": order_id, "payment_id": result["payment"]["id"]})
    return success_response({"message": "Payment confirmed", **result})
