from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Query
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.products.models import ProductCreateIn, ProductDeleteIn, ProductUpdateIn
from storefront.products.repository import fetch_products, products_out
from storefront.products.services import create_product, deactivate_product, update_product
from storefront.user.repository import MerchantAccount, load_account, require_merchant
from storefront.products.constants import logger

prods_router=APIRouter()


#* public and customer callers see the active catalog , a merchant sees every product it owns
@prods_router.get("/list")
async def get_products(usuario_id: Optional[str] = Query(None, alias="usuarioId"),
                       session: AsyncSession = Depends(get_session)):

    merchant_id = None
    only_active = True
    if usuario_id:
        account = await load_account(session,usuario_id)
        if account is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if isinstance(account, MerchantAccount):
            merchant_id = account.merchant_id
            only_active = False

    products = await fetch_products(session,merchant_id=merchant_id,only_active=only_active)
    items = await products_out(session,products)
    return success_response({"message": "Products loaded", "products": items, "total": len(items)})


@prods_router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_product(payload: ProductCreateIn, session: AsyncSession = Depends(get_session)):

    merchant = await require_merchant(session,payload.user_id)
    logger.info("product.create.attempt", extra={"merchant_id": merchant.merchant_id})

    product = await create_product(session,merchant,payload)

    logger.info("product.create.success", extra={"product_id": product["id"], "merchant_id": merchant.merchant_id})
    return success_response({"message": "Product created", "product": product}, status_code=status.HTTP_201_CREATED)


@prods_router.put("/update")
async def put_product(payload: ProductUpdateIn, session: AsyncSession = Depends(get_session)):

    if payload.product_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="produtoId is required")
    merchant = await require_merchant(session,payload.user_id)
    logger.info("product.update.attempt", extra={"product_id": payload.product_id, "merchant_id": merchant.merchant_id})

    product = await update_product(session,merchant,payload)

    logger.info("product.update.success", extra={"product_id": product["id"]})
    return success_response({"message": "Product updated", "product": product})


@prods_router.delete("/delete")
async def delete_product(payload: ProductDeleteIn, session: AsyncSession = Depends(get_session)):

    if not payload.user_id or payload.product_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="usuarioId and produtoId are required")
    merchant = await require_merchant(session,payload.user_id)
    logger.info("product.delete.attempt", extra={"product_id": payload.product_id, "merchant_id": merchant.merchant_id})

    result = await deactivate_product(session,merchant,payload.product_id)
    return success_response(result)
