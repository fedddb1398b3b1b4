from collections import defaultdict
from typing import Dict, Iterable, List
from sqlalchemy import delete, select
from storefront.common.utils import money_out
from storefront.products.variants import VariantResolver
from storefront.schema.full_schema import CartItem, Category, Merchant, Product, ProductImage, Users


async def product_by_id(session,product_id):
    res = await session.execute(select(Product).where(Product.id == product_id))
    return res.scalar_one_or_none()


async def product_id_by_name(session,name,exclude_id=None):
    stmt = select(Product.id).where(Product.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)
    res = await session.execute(stmt)
    return res.scalars().first()


async def products_by_ids(session,product_ids: Iterable[int]) -> Dict[int, Product]:
    ids = list(set(product_ids))
    if not ids:
        return {}
    res = await session.execute(select(Product).where(Product.id.in_(ids)))
    return {p.id: p for p in res.scalars().all()}


async def fetch_products(session,merchant_id=None,only_active=True) -> List[Product]:
    stmt = select(Product)
    if merchant_id is not None:
        stmt = stmt.where(Product.merchant_id == merchant_id)
    if only_active:
        stmt = stmt.where(Product.active == True)  # noqa: E712
    stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc())
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def images_for_products(session,product_ids: Iterable[int]) -> Dict[int, List[str]]:
    ids = list(set(product_ids))
    out: Dict[int, List[str]] = defaultdict(list)
    if not ids:
        return out
    stmt = (select(ProductImage.product_id, ProductImage.url)
            .where(ProductImage.product_id.in_(ids))
            .order_by(ProductImage.product_id, ProductImage.sort_order.asc(), ProductImage.id.asc()))
    res = await session.execute(stmt)
    for product_id, url in res.all():
        out[product_id].append(url)
    return out


async def categories_by_ids(session,category_ids: Iterable[int]) -> Dict[int, Category]:
    ids = list(set(category_ids))
    if not ids:
        return {}
    res = await session.execute(select(Category).where(Category.id.in_(ids)))
    return {c.id: c for c in res.scalars().all()}


async def merchants_by_ids(session,merchant_ids: Iterable[int]) -> Dict[int, dict]:
    ids = list(set(merchant_ids))
    if not ids:
        return {}
    stmt = (select(Merchant.id, Merchant.company_name, Users.id, Users.name, Users.email)
            .join(Users, Users.id == Merchant.user_id)
            .where(Merchant.id.in_(ids)))
    res = await session.execute(stmt)
    return {
        row[0]: {"id": row[0], "companyName": row[1], "usuario": {"id": row[2], "name": row[3], "email": row[4]}}
        for row in res.all()
    }


async def replace_images(session,product_id,urls: List[str]):
    await session.execute(delete(ProductImage).where(ProductImage.product_id == product_id))
    for i, url in enumerate(urls):
        session.add(ProductImage(product_id=product_id, url=url, sort_order=i))
    await session.flush()


async def purge_cart_items(session,product_id) -> int:
    res = await session.execute(delete(CartItem).where(CartItem.product_id == product_id))
    return res.rowcount or 0


def product_out(product: Product, category=None, merchant=None, images=None) -> dict:
    images = list(images or [])
    resolver = VariantResolver.from_product(product)
    return {
        "id": product.id,
        "name": product.name,
        "price": money_out(product.price),
        "description": product.description,
        "active": bool(product.active),
        "stock": product.stock,
        "categoryId": product.category_id,
        "category": {"id": category.id, "name": category.name} if category is not None else None,
        "merchantId": product.merchant_id,
        "merchant": merchant,
        "images": images,
        "image": images[0] if images else None,
        "colors": list(product.colors or []),
        "sizes": list(product.sizes or []),
        "stockByVariant": product.stock_by_variant,
        "availableColors": resolver.available_colors(),
        "availableSizes": resolver.available_sizes(),
        "createdAt": product.created_at,
        "updatedAt": product.updated_at,
    }


async def products_out(session,products: List[Product]) -> List[dict]:
    ids = [p.id for p in products]
    images = await images_for_products(session,ids)
    categories = await categories_by_ids(session,[p.category_id for p in products])
    merchants = await merchants_by_ids(session,[p.merchant_id for p in products])
    return [
        product_out(p, categories.get(p.category_id), merchants.get(p.merchant_id), images.get(p.id))
        for p in products
    ]
