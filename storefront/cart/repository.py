from typing import Dict, List, Tuple
from sqlalchemy import delete, select
from storefront.common.utils import now
from storefront.schema.full_schema import Cart, CartItem


async def latest_cart(session,customer_id):
    # duplicates are tolerated , the newest cart wins
    stmt = (select(Cart).where(Cart.customer_id == customer_id)
            .order_by(Cart.created_at.desc(), Cart.id.desc()).limit(1))
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def latest_updated_cart(session,customer_id):
    stmt = (select(Cart).where(Cart.customer_id == customer_id)
            .order_by(Cart.updated_at.desc(), Cart.id.desc()).limit(1))
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def get_or_create_cart(session,customer_id):
    cart = await latest_cart(session,customer_id)
    if cart is not None:
        return cart
    cart = Cart(customer_id=customer_id)
    session.add(cart)
    await session.flush()
    return cart


async def cart_items(session,cart_id) -> List[CartItem]:
    stmt = select(CartItem).where(CartItem.cart_id == cart_id).order_by(CartItem.id.asc())
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def replace_cart_items(session,cart,lines: Dict[Tuple[int, str, str], int]):
    """Delete every line of the cart and insert the new set , caller commits."""
    await session.execute(delete(CartItem).where(CartItem.cart_id == cart.id))
    for (product_id, size, color), quantity in lines.items():
        session.add(CartItem(cart_id=cart.id, product_id=product_id, quantity=quantity,
                             selected_size=size or None, selected_color=color or None))
    cart.updated_at = now()
    session.add(cart)
    await session.flush()


async def clear_cart_items(session,cart_id) -> int:
    res = await session.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
    return res.rowcount or 0
