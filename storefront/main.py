from contextlib import asynccontextmanager
from fastapi import FastAPI
from storefront.api import cur_version
from storefront.api.routers import public_routers
from storefront.common.custom_exceptions import register_all_exceptions
from storefront.common.logging_setup import setup_logging, shutdown_logging
from storefront.config.settings import config_settings
from storefront.db.connection import async_engine
from storefront.middlewares.request_id_middleware import RequestIdMiddleware


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    logger = setup_logging()
    logger.info("app.startup", extra={"env": config_settings.ENV, "service": config_settings.SERVICE_NAME})

    try:
        yield
    finally:
        await async_engine.dispose()
        shutdown_logging()


def create_app():
    app=FastAPI(
        title="BAXEINWEAR",
        version=cur_version,
        lifespan=app_lifespan)

    app.include_router(public_routers)

    app.add_middleware(RequestIdMiddleware)
    register_all_exceptions(app)

    return app

app=create_app()
