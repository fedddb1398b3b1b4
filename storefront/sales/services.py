from collections import OrderedDict
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from fastapi import HTTPException,status
from storefront.common.utils import money_out, to_money
from storefront.config.settings import config_settings

TOP_VARIANTS_LIMIT = config_settings.TOP_VARIANTS_LIMIT

END_OF_DAY = time(23, 59, 59, 999000)


def parse_date_filter(raw: Optional[str], label: str, end_of_day: bool = False) -> Optional[datetime]:
    """
    Accept "YYYY-MM-DD" or a full ISO datetime.
    The end bound always covers the whole calendar day it falls on.
    """
    if raw is None or not raw.strip():
        return None
    value = raw.strip()
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(value), time.min)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{label} is not a valid date")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if end_of_day:
        parsed = datetime.combine(parsed.date(), END_OF_DAY, tzinfo=parsed.tzinfo)
    return parsed


class _ProductTally:
    __slots__ = ("product_id", "quantity", "revenue", "prices", "order_ids", "last_sale", "variants")

    def __init__(self, product_id: int):
        self.product_id = product_id
        self.quantity = 0
        self.revenue = Decimal("0")
        self.prices: List[Decimal] = []
        self.order_ids = set()
        self.last_sale: Optional[datetime] = None
        self.variants: "OrderedDict[Tuple[Optional[str], Optional[str]], int]" = OrderedDict()


def aggregate_sales(orders: Iterable, items_by_order: Mapping[int, Iterable], products: Mapping[int, object],
                    category_names: Mapping[int, str], primary_images: Mapping[int, Optional[str]],
                    category_id: Optional[int] = None, top_variants: int = TOP_VARIANTS_LIMIT) -> Dict:
    """
    Roll a merchant's order lines up per product.

    Lines whose product is outside `category_id` are skipped. Revenue uses the frozen
    unit price. Variants are tallied per (color, size) pair , missing values stay None.
    Rows come back sorted by revenue, highest first.
    """
    tallies: Dict[int, _ProductTally] = {}
    contributing_orders = set()

    for order in orders:
        for item in items_by_order.get(order.id, []):
            product = products.get(item.product_id)
            if product is None:
                continue
            if category_id is not None and product.category_id != category_id:
                continue

            tally = tallies.get(item.product_id)
            if tally is None:
                tally = tallies[item.product_id] = _ProductTally(item.product_id)

            unit_price = Decimal(item.unit_price)
            tally.quantity += item.quantity
            tally.revenue += unit_price * item.quantity
            tally.prices.append(unit_price)
            tally.order_ids.add(order.id)
            if tally.last_sale is None or order.created_at > tally.last_sale:
                tally.last_sale = order.created_at

            key = (item.selected_color or None, item.selected_size or None)
            tally.variants[key] = tally.variants.get(key, 0) + item.quantity
            contributing_orders.add(order.id)

    rows = []
    for tally in tallies.values():
        product = products[tally.product_id]
        ranked = sorted(tally.variants.items(), key=lambda kv: kv[1], reverse=True)[:top_variants]
        rows.append({
            "productId": tally.product_id,
            "name": product.name,
            "category": category_names.get(product.category_id),
            "primaryImage": primary_images.get(tally.product_id),
            "active": bool(product.active),
            "totalQuantity": tally.quantity,
            "totalRevenue": money_out(tally.revenue),
            "orderCount": len(tally.order_ids),
            "averagePrice": money_out(sum(tally.prices, Decimal("0")) / len(tally.prices)),
            "lastSale": tally.last_sale,
            "topVariants": [{"color": c, "size": s, "quantity": q} for (c, s), q in ranked],
            "_revenue": tally.revenue,
        })

    rows.sort(key=lambda r: r["_revenue"], reverse=True)
    total_revenue = sum((r.pop("_revenue") for r in rows), Decimal("0"))

    return {
        "salesHistory": rows,
        "summary": {
            "totalUnits": sum(r["totalQuantity"] for r in rows),
            "totalRevenue": money_out(to_money(total_revenue)),
            "totalOrders": len(contributing_orders),
        },
    }
