from fastapi import APIRouter
from storefront.api import version_prefix
from storefront.auth.routes import auth_router
from storefront.categories.routes import categories_router
from storefront.products.routes import prods_router
from storefront.cart.routes import carts_router
from storefront.orders.routes import orders_router
from storefront.sales.routes import sales_router
from storefront.common.routes import home_router


public_routers = APIRouter(prefix=version_prefix)

public_routers.include_router(auth_router, tags=["auth"])
public_routers.include_router(categories_router, prefix="/categories", tags=["categories"])
public_routers.include_router(prods_router, prefix="/products", tags=["products"])
public_routers.include_router(carts_router, prefix="/cart", tags=["cart"])
public_routers.include_router(orders_router, prefix="/orders", tags=["orders"])
public_routers.include_router(sales_router, prefix="/sales", tags=["sales"])
public_routers.include_router(home_router, tags=["home"])
