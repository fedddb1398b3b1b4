from fastapi import HTTPException,status
from sqlalchemy.exc import IntegrityError
from storefront.categories.repository import category_by_id
from storefront.products.models import ProductCreateIn, ProductUpdateIn
from storefront.products.repository import (product_by_id, product_id_by_name, products_out, purge_cart_items,
                                            replace_images)
from storefront.products.utils import (bad_request, clean_image_urls, clean_str_list, normalize_stock_map,
                                       parse_active, parse_positive_id, parse_price, parse_stock)
from storefront.schema.full_schema import Product
from storefront.user.repository import MerchantAccount
from storefront.products.constants import logger


async def _require_category(session,raw_category_id):
    category_id = parse_positive_id(raw_category_id, "categoriaId")
    category = await category_by_id(session,category_id)
    if category is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category_id


async def _ensure_unique_name(session,name,exclude_id=None):
    if await product_id_by_name(session,name,exclude_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A product with this name already exists")


async def _owned_product(session,merchant: MerchantAccount,raw_product_id):
    product_id = parse_positive_id(raw_product_id, "produtoId")
    product = await product_by_id(session,product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    if product.merchant_id != merchant.merchant_id:
        logger.warning("product.ownership_denied",
                       extra={"product_id": product_id, "merchant_id": merchant.merchant_id})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not own this product")
    return product


async def _product_view(session,product) -> dict:
    return (await products_out(session,[product]))[0]


async def create_product(session,merchant: MerchantAccount,payload: ProductCreateIn) -> dict:

    name = (payload.name or "").strip()
    if not name or payload.price is None or payload.category_id is None:
        bad_request("nome, preco and categoriaId are required")

    category_id = await _require_category(session,payload.category_id)
    price = parse_price(payload.price)
    images = clean_image_urls(payload.images)
    colors = clean_str_list(payload.colors, "cores")
    sizes = clean_str_list(payload.sizes, "tamanhos")
    stock_map = normalize_stock_map(payload.stock_by_variant)

    if payload.stock is not None:
        stock = parse_stock(payload.stock)
    else:
        stock = sum(stock_map.values()) if stock_map else 0

    await _ensure_unique_name(session,name)

    product = Product(
        name=name,
        price=price,
        category_id=category_id,
        merchant_id=merchant.merchant_id,
        description=(payload.description or "").strip() or None,
        active=True,
        stock=stock,
        colors=colors,
        sizes=sizes,
        stock_by_variant=stock_map,
    )
    try:
        session.add(product)
        await session.flush()
        await replace_images(session,product.id,images)
        view = await _product_view(session,product)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.warning("product.create.integrity_error", extra={"product_name": name})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A product with this name already exists")

    return view


async def update_product(session,merchant: MerchantAccount,payload: ProductUpdateIn) -> dict:
    product = await _owned_product(session,merchant,payload.product_id)

    # only keys present in the request body are touched
    sent = payload.model_fields_set
    updates = {}

    if "name" in sent and isinstance(payload.name, str) and payload.name.strip():
        name = payload.name.strip()
        if name != product.name:
            await _ensure_unique_name(session,name,exclude_id=product.id)
        updates["name"] = name
    if "price" in sent:
        updates["price"] = parse_price(payload.price)
    if "category_id" in sent:
        updates["category_id"] = await _require_category(session,payload.category_id)
    if "description" in sent:
        updates["description"] = (payload.description or "").strip() or None
    if "stock" in sent:
        updates["stock"] = parse_stock(payload.stock)
    if "active" in sent:
        updates["active"] = parse_active(payload.active)
    if "colors" in sent:
        updates["colors"] = clean_str_list(payload.colors, "cores")
    if "sizes" in sent:
        updates["sizes"] = clean_str_list(payload.sizes, "tamanhos")
    if "stock_by_variant" in sent:
        updates["stock_by_variant"] = normalize_stock_map(payload.stock_by_variant)
    new_images = clean_image_urls(payload.images) if "images" in sent else None

    if not updates and new_images is None:
        bad_request("No fields to update")

    # going inactive through update follows the same rules as delete
    deactivating = product.active and updates.get("active") is False
    if deactivating:
        updates["stock"] = 0

    purged = 0
    try:
        for field, value in updates.items():
            setattr(product, field, value)
        session.add(product)
        if deactivating:
            purged = await purge_cart_items(session,product.id)
        if new_images is not None:
            await replace_images(session,product.id,new_images)
        await session.flush()
        view = await _product_view(session,product)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.warning("product.update.integrity_error", extra={"product_id": product.id})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A product with this name already exists")

    logger.info("product.update.fields", extra={"product_id": product.id, "fields": sorted(updates),
                                                 "images_replaced": new_images is not None,
                                                 "cart_items_purged": purged})
    return view


async def deactivate_product(session,merchant: MerchantAccount,raw_product_id) -> dict:
    """
    Soft delete: the product goes inactive with zero stock and leaves every cart.
    Order lines keep pointing at it with their frozen prices.
    """
    product = await _owned_product(session,merchant,raw_product_id)

    if not product.active:
        purged = await purge_cart_items(session,product.id)
        await session.commit()
        logger.info("product.delete.already_inactive", extra={"product_id": product.id, "cart_items_purged": purged})
        return {"message": "Product was already inactive , cart entries removed", "cartItemsRemoved": purged}

    purged = await purge_cart_items(session,product.id)
    product.active = False
    product.stock = 0
    session.add(product)
    await session.commit()

    logger.info("product.delete.success", extra={"product_id": product.id, "cart_items_purged": purged})
    return {"message": "Product deactivated and removed from carts", "cartItemsRemoved": purged}
