from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select
from storefront.schema.full_schema import Customer, Merchant, OrderItem, OrderStatus, Orders, Payment, PaymentStatus, Users


async def order_by_id(session,order_id):
    res = await session.execute(select(Orders).where(Orders.id == order_id))
    return res.scalar_one_or_none()


async def orders_for_customer(session,customer_id) -> List[Orders]:
    stmt = (select(Orders).where(Orders.customer_id == customer_id)
            .order_by(Orders.created_at.desc(), Orders.id.desc()))
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def orders_for_merchant(session,merchant_id,start: Optional[datetime] = None,
                              end: Optional[datetime] = None) -> List[Orders]:
    stmt = select(Orders).where(Orders.merchant_id == merchant_id)
    if start is not None:
        stmt = stmt.where(Orders.created_at >= start)
    if end is not None:
        stmt = stmt.where(Orders.created_at <= end)
    stmt = stmt.order_by(Orders.created_at.desc(), Orders.id.desc())
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def items_for_orders(session,order_ids: Iterable[int]) -> Dict[int, List[OrderItem]]:
    ids = list(set(order_ids))
    out: Dict[int, List[OrderItem]] = defaultdict(list)
    if not ids:
        return out
    stmt = select(OrderItem).where(OrderItem.order_id.in_(ids)).order_by(OrderItem.id.asc())
    res = await session.execute(stmt)
    for item in res.scalars().all():
        out[item.order_id].append(item)
    return out


async def payments_for_orders(session,order_ids: Iterable[int]) -> Dict[int, List[Payment]]:
    ids = list(set(order_ids))
    out: Dict[int, List[Payment]] = defaultdict(list)
    if not ids:
        return out
    stmt = select(Payment).where(Payment.order_id.in_(ids)).order_by(Payment.created_at.asc(), Payment.id.asc())
    res = await session.execute(stmt)
    for payment in res.scalars().all():
        out[payment.order_id].append(payment)
    return out


async def customer_summary(session,customer_id) -> Optional[dict]:
    stmt = (select(Customer.id, Customer.address, Users.id, Users.name, Users.email)
            .join(Users, Users.id == Customer.user_id)
            .where(Customer.id == customer_id))
    row = (await session.execute(stmt)).first()
    if row is None:
        return None
    return {"id": row[0], "address": row[1], "usuario": {"id": row[2], "name": row[3], "email": row[4]}}


async def merchant_summaries(session,merchant_ids: Iterable[int]) -> Dict[int, dict]:
    ids = list(set(merchant_ids))
    if not ids:
        return {}
    stmt = (select(Merchant.id, Merchant.company_name, Users.name, Users.email)
            .join(Users, Users.id == Merchant.user_id)
            .where(Merchant.id.in_(ids)))
    res = await session.execute(stmt)
    return {row[0]: {"id": row[0], "companyName": row[1], "name": row[2], "email": row[3]} for row in res.all()}


def insert_order(session,customer_id,merchant_id,shipping_address) -> Orders:
    order = Orders(customer_id=customer_id, merchant_id=merchant_id, shipping_address=shipping_address,
                   status=OrderStatus.PENDING_PAYMENT.value)
    session.add(order)
    return order


def insert_payment(session,order_id,customer_id,amount,payment_type) -> Payment:
    payment = Payment(order_id=order_id, customer_id=customer_id, amount=amount,
                      status=PaymentStatus.PAID.value, payment_type=payment_type)
    session.add(payment)
    return payment
