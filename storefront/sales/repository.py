from typing import Dict, Optional
from storefront.categories.repository import list_categories
from storefront.orders.repository import items_for_orders, orders_for_merchant
from storefront.products.repository import images_for_products, products_by_ids


async def load_merchant_sales(session,merchant_id,start=None,end=None):
    """Everything the aggregator needs , in one bulk read per table."""
    orders = await orders_for_merchant(session,merchant_id,start,end)
    items = await items_for_orders(session,[o.id for o in orders])
    products = await products_by_ids(session,[it.product_id for its in items.values() for it in its])
    images = await images_for_products(session,products.keys())
    primary_images: Dict[int, Optional[str]] = {pid: (urls[0] if urls else None) for pid, urls in images.items()}
    categories = {c.id: c.name for c in await list_categories(session)}
    return orders, items, products, categories, primary_images
