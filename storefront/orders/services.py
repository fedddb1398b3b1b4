from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional
from fastapi import HTTPException,status
from storefront.cart.repository import cart_items, clear_cart_items, latest_updated_cart
from storefront.common.utils import money_out, now, to_money
from storefront.config.settings import config_settings
from storefront.orders.constants import DEFAULT_PAYMENT_TYPE, logger
from storefront.orders.models import PaymentIn
from storefront.orders.repository import (customer_summary, insert_order, insert_payment, items_for_orders,
                                          merchant_summaries, order_by_id, orders_for_customer, payments_for_orders)
from storefront.orders.utils import status_label, status_value, validate_shipping_address
from storefront.products.repository import images_for_products, products_by_ids
from storefront.products.variants import VariantResolver
from storefront.schema.full_schema import OrderItem, OrderStatus, Orders, PaymentStatus
from storefront.user.repository import CustomerAccount

SHIPPING_FEE = config_settings.DEFAULT_SHIPPING_FEE
AMOUNT_TOLERANCE = config_settings.PAYMENT_AMOUNT_TOLERANCE


def _bad_request(detail: str):
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _parse_amount(value, label: str) -> Decimal:
    if value is None or isinstance(value, bool):
        _bad_request(f"{label} is required and must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        _bad_request(f"{label} must be a number")
    if not amount.is_finite():
        _bad_request(f"{label} must be a number")
    return amount


def items_subtotal(items: List[OrderItem]) -> Decimal:
    """Sum of frozen unit price * quantity , the live product price never enters here."""
    return to_money(sum((Decimal(it.unit_price) * it.quantity for it in items), Decimal("0")))


async def create_order_from_cart(session,customer: CustomerAccount,raw_address) -> dict:

    address = validate_shipping_address(raw_address)

    cart = await latest_updated_cart(session,customer.customer_id)
    lines = await cart_items(session,cart.id) if cart is not None else []
    if not lines:
        logger.warning("order.create.empty_cart", extra={"customer_id": customer.customer_id})
        _bad_request("Cart is empty or was not found")

    products = await products_by_ids(session,[ln.product_id for ln in lines])

    merchant_ids = {products[ln.product_id].merchant_id for ln in lines if ln.product_id in products}
    if not merchant_ids:
        _bad_request("Could not identify the merchant for the cart items")
    if len(merchant_ids) > 1:
        logger.warning("order.create.mixed_merchants",
                       extra={"customer_id": customer.customer_id, "merchant_ids": sorted(merchant_ids)})
        _bad_request("Cart mixes products from different merchants , split the items by merchant before continuing")
    merchant_id = merchant_ids.pop()

    for ln in lines:
        product = products.get(ln.product_id)
        if product is None or not product.active:
            _bad_request(f"Product {ln.product_id} is no longer available")
        resolver = VariantResolver.from_product(product)
        if not resolver.has_stock(ln.selected_color or "", ln.selected_size or ""):
            _bad_request(f"Product '{product.name}' is out of stock for the selected size/color")

    total = Decimal("0")
    order = insert_order(session,customer.customer_id,merchant_id,address)
    await session.flush()

    breakdown = []
    for ln in lines:
        product = products[ln.product_id]
        unit_price = to_money(product.price)      # frozen here
        subtotal = to_money(unit_price * ln.quantity)
        total += subtotal
        item = OrderItem(order_id=order.id, product_id=product.id, quantity=ln.quantity, unit_price=unit_price,
                         selected_color=ln.selected_color, selected_size=ln.selected_size)
        session.add(item)
        breakdown.append((item, product.name, subtotal))

    await clear_cart_items(session,cart.id)
    await session.flush()
    await session.commit()

    logger.info("order.create.rows", extra={"order_id": order.id, "merchant_id": merchant_id, "lines": len(breakdown)})

    return {
        "id": order.id,
        "status": status_value(order.status),
        "statusLabel": status_label(order.status),
        "createdAt": order.created_at,
        "shippingAddress": order.shipping_address,
        "totalAmount": money_out(total),
        "items": [
            {
                "id": item.id,
                "productId": item.product_id,
                "productName": name,
                "quantity": item.quantity,
                "unitPrice": money_out(item.unit_price),
                "subtotal": money_out(subtotal),
                "selectedColor": item.selected_color,
                "selectedSize": item.selected_size,
            }
            for item, name, subtotal in breakdown
        ],
    }


async def _owned_order(session,customer: CustomerAccount,order_id: int) -> Orders:
    order = await order_by_id(session,order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    if order.customer_id != customer.customer_id:
        logger.warning("order.ownership_denied", extra={"order_id": order_id, "customer_id": customer.customer_id})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this order")
    return order


async def confirm_payment(session,customer: CustomerAccount,order_id: int,payment: Optional[PaymentIn]) -> dict:

    if payment is None:
        _bad_request("payment is required")
    amount = _parse_amount(payment.amount, "valor")
    shipping_fee = SHIPPING_FEE
    if payment.shipping_fee is not None:
        shipping_fee = _parse_amount(payment.shipping_fee, "frete")
        if shipping_fee < 0:
            _bad_request("frete must not be negative")
    payment_type = (payment.payment_type or "").strip() or DEFAULT_PAYMENT_TYPE

    order = await _owned_order(session,customer,order_id)

    current = status_value(order.status)
    if current != OrderStatus.PENDING_PAYMENT.value:
        logger.warning("payment.confirm.invalid_status", extra={"order_id": order.id, "status": current})
        _bad_request(f"Order cannot be paid while in status '{status_label(current)}' ({current})")

    items = (await items_for_orders(session,[order.id]))[order.id]
    subtotal = items_subtotal(items)
    expected = to_money(subtotal + shipping_fee)

    if abs(amount - expected) > AMOUNT_TOLERANCE:
        logger.warning("payment.confirm.amount_mismatch",
                       extra={"order_id": order.id, "amount": str(amount), "expected": str(expected)})
        _bad_request(f"Payment amount {to_money(amount)} does not match the expected total {expected}")

    row = insert_payment(session,order.id,customer.customer_id,to_money(amount),payment_type)
    order.status = OrderStatus.IN_TRANSIT.value
    order.updated_at = now()
    session.add(order)
    await session.flush()
    await session.commit()

    return {
        "order": {"id": order.id, "status": order.status, "statusLabel": status_label(order.status)},
        "payment": {
            "id": row.id,
            "amount": money_out(row.amount),
            "status": PaymentStatus.PAID.value,
            "paymentType": row.payment_type,
            "subtotal": money_out(subtotal),
            "shippingFee": money_out(shipping_fee),
        },
    }


def _payment_out(p) -> dict:
    return {"id": p.id, "amount": money_out(p.amount), "status": p.status,
            "paymentType": p.payment_type, "createdAt": p.created_at}


def _totals(items, payments) -> Dict[str, float]:
    total = items_subtotal(items)
    paid = to_money(sum((Decimal(p.amount) for p in payments if p.status == PaymentStatus.PAID.value),
                        Decimal("0")))
    remaining = total - paid
    if remaining < 0:
        remaining = Decimal("0")
    return {"total": money_out(total), "totalPaid": money_out(paid), "remainingBalance": money_out(remaining)}


async def list_customer_orders(session,customer: CustomerAccount) -> List[dict]:
    orders = await orders_for_customer(session,customer.customer_id)
    ids = [o.id for o in orders]
    items = await items_for_orders(session,ids)
    payments = await payments_for_orders(session,ids)
    merchants = await merchant_summaries(session,[o.merchant_id for o in orders])
    products = await products_by_ids(session,[it.product_id for its in items.values() for it in its])

    out = []
    for o in orders:
        its = items.get(o.id, [])
        pays = payments.get(o.id, [])
        out.append({
            "id": o.id,
            "status": status_value(o.status),
            "statusLabel": status_label(o.status),
            "createdAt": o.created_at,
            "updatedAt": o.updated_at,
            "merchant": merchants.get(o.merchant_id),
            "items": [
                {
                    "id": it.id,
                    "productId": it.product_id,
                    "productName": products[it.product_id].name if it.product_id in products else None,
                    "quantity": it.quantity,
                    "unitPrice": money_out(it.unit_price),
                    "subtotal": money_out(Decimal(it.unit_price) * it.quantity),
                    "selectedColor": it.selected_color,
                    "selectedSize": it.selected_size,
                }
                for it in its
            ],
            "payments": [_payment_out(p) for p in pays],
            **_totals(its, pays),
        })
    return out


async def order_detail(session,customer: CustomerAccount,order_id: int) -> dict:
    order = await _owned_order(session,customer,order_id)

    items = (await items_for_orders(session,[order.id]))[order.id]
    payments = (await payments_for_orders(session,[order.id]))[order.id]
    products = await products_by_ids(session,[it.product_id for it in items])
    images = await images_for_products(session,products.keys())
    customer_info = await customer_summary(session,order.customer_id)
    merchant_info = (await merchant_summaries(session,[order.merchant_id])).get(order.merchant_id)

    # orders created before address snapshots fall back to the profile address
    shipping_address = order.shipping_address
    if not shipping_address and customer_info is not None:
        shipping_address = {"logradouro": customer_info["address"], "fromProfile": True}

    detail_items = []
    for it in items:
        p = products.get(it.product_id)
        gallery = images.get(it.product_id, [])
        detail_items.append({
            "id": it.id,
            "productId": it.product_id,
            "productName": p.name if p is not None else None,
            "image": gallery[0] if gallery else None,
            "quantity": it.quantity,
            "unitPrice": money_out(it.unit_price),
            "currentPrice": money_out(p.price) if p is not None else None,
            "subtotal": money_out(Decimal(it.unit_price) * it.quantity),
            "selectedColor": it.selected_color,
            "selectedSize": it.selected_size,
        })

    return {
        "id": order.id,
        "status": status_value(order.status),
        "statusLabel": status_label(order.status),
        "createdAt": order.created_at,
        "updatedAt": order.updated_at,
        "shippingAddress": shipping_address,
        "customer": customer_info,
        "merchant": merchant_info,
        "items": detail_items,
        "payments": [_payment_out(p) for p in payments],
        **_totals(items, payments),
    }
