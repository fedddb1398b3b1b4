from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.params import Query
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.products.utils import parse_int
from storefront.sales.repository import load_merchant_sales
from storefront.sales.services import aggregate_sales, parse_date_filter
from storefront.user.repository import require_merchant
from storefront.sales.constants import logger

sales_router = APIRouter()


@sales_router.get("/history")
async def sales_history(usuario_id: Optional[str] = Query(None, alias="usuarioId"),
                        categoria_id: Optional[str] = Query(None, alias="categoriaId"),
                        data_inicio: Optional[str] = Query(None, alias="dataInicio"),
                        data_fim: Optional[str] = Query(None, alias="dataFim"),
                        session: AsyncSession = Depends(get_session)):

    merchant = await require_merchant(session,usuario_id)

    category_id = None
    if categoria_id is not None and categoria_id.strip():
        category_id = parse_int(categoria_id)
        if category_id is None or category_id <= 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="categoriaId must be a valid number")
    start = parse_date_filter(data_inicio, "dataInicio")
    end = parse_date_filter(data_fim, "dataFim", end_of_day=True)

    orders, items, products, categories, images = await load_merchant_sales(session,merchant.merchant_id,start,end)
    report = aggregate_sales(orders, items, products, categories, images, category_id=category_id)

    logger.info("sales.history.loaded", extra={"merchant_id": merchant.merchant_id, "orders": len(orders),
                                               "products": len(report["salesHistory"])})
    message = "Sales history loaded" if report["salesHistory"] else "No sales found for this merchant"
    return success_response({"message": message, **report})
