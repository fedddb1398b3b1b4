from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from fastapi import HTTPException,status
from storefront.cart.models import CartItemInput
from storefront.cart.repository import cart_items, get_or_create_cart, latest_cart, replace_cart_items
from storefront.common.utils import money_out, to_money
from storefront.products.repository import images_for_products, products_by_ids
from storefront.products.utils import parse_int
from storefront.user.repository import CustomerAccount
from storefront.cart.constants import logger

LineKey = Tuple[int, str, str]


def _clean_variant(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_cart_items(items: List[CartItemInput]) -> Dict[LineKey, int]:
    """
    Drop lines without a usable product id or with a non-positive quantity and
    merge the rest by (product, size, color), summing quantities. Order of first
    appearance is kept.
    """
    merged: Dict[LineKey, int] = {}
    for item in items:
        product_id = parse_int(item.product_id if item.product_id is not None else item.id)
        quantity = parse_int(item.quantity)
        if product_id is None or product_id <= 0 or quantity is None or quantity <= 0:
            continue
        key = (product_id, _clean_variant(item.selected_size), _clean_variant(item.selected_color))
        merged[key] = merged.get(key, 0) + quantity
    return merged


async def cart_view(session,cart) -> dict:
    if cart is None:
        return {"cart": None, "items": [], "total": 0.0, "itemCount": 0}

    items = await cart_items(session,cart.id)
    products = await products_by_ids(session,[it.product_id for it in items])
    images = await images_for_products(session,products.keys())

    out = []
    total = Decimal("0")
    count = 0
    for it in items:
        p = products.get(it.product_id)
        if p is None:
            continue
        gallery = images.get(p.id, [])
        subtotal = to_money(p.price * it.quantity)
        total += subtotal
        count += it.quantity
        out.append({
            "id": it.id,
            "productId": p.id,
            "quantity": it.quantity,
            "selectedSize": it.selected_size,
            "selectedColor": it.selected_color,
            "subtotal": money_out(subtotal),
            "product": {
                "id": p.id,
                "name": p.name,
                "price": money_out(p.price),
                "image": gallery[0] if gallery else None,
                "images": gallery,
                "active": bool(p.active),
                "colors": list(p.colors or []),
                "sizes": list(p.sizes or []),
                "stockByVariant": p.stock_by_variant,
            },
        })

    return {
        "cart": {"id": cart.id, "createdAt": cart.created_at, "updatedAt": cart.updated_at},
        "items": out,
        "total": money_out(total),
        "itemCount": count,
    }


async def get_customer_cart(session,customer: CustomerAccount) -> dict:
    cart = await latest_cart(session,customer.customer_id)
    return await cart_view(session,cart)


async def replace_customer_cart(session,customer: CustomerAccount,items: List[CartItemInput]) -> dict:
    lines = normalize_cart_items(items)
    if items and not lines:
        logger.warning("cart.replace.no_valid_items", extra={"customer_id": customer.customer_id, "sent": len(items)})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid cart items were sent")

    products = await products_by_ids(session,[k[0] for k in lines])
    missing = sorted({k[0] for k in lines if k[0] not in products})
    if missing:
        logger.warning("cart.replace.missing_products", extra={"customer_id": customer.customer_id, "missing": missing})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                            detail={"error": "Some products were not found", "missingProductIds": missing})

    skipped = sorted({k[0] for k in lines if not products[k[0]].active})
    kept = {k: q for k, q in lines.items() if products[k[0]].active}

    cart = await get_or_create_cart(session,customer.customer_id)
    await replace_cart_items(session,cart,kept)
    view = await cart_view(session,cart)
    await session.commit()

    logger.info("cart.replace.success", extra={"customer_id": customer.customer_id, "cart_id": cart.id,
                                               "lines": len(kept), "skipped": skipped})
    view["skippedProductIds"] = skipped
    return view
