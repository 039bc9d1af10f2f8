from contextlib import asynccontextmanager
from fastapi import FastAPI
from metapay.api import cur_version
from metapay.api.routers import admin_routers, public_routers
from metapay.common.custom_exceptions import register_all_exceptions
from metapay.common.logging_setup import get_logger, setup_logging, stop_logging
from metapay.config.admin_config import admin_config
from metapay.db.connection import async_engine
from metapay.middlewares.request_id_middleware import RequestIdMiddleware
from metapay.processor.client import ProcessorClient

logger = get_logger("metapay.app")


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    setup_logging()
    app.state.processor = ProcessorClient()
    logger.info("app.startup", extra={"env": admin_config.ENV, "admin_enabled": admin_config.ENABLE_ADMIN})

    try:
        yield
    finally:
        # new requests are no longer accepted at this point
        await app.state.processor.aclose()
        await async_engine.dispose()
        logger.info("app.shutdown")
        stop_logging()


def create_app():
    app=FastAPI(
        title="MetaPay",
        version=cur_version,
        lifespan=app_lifespan)

    app.include_router(public_routers)

    if admin_config.ENABLE_ADMIN:
        # tokens are signed with the admin secret material, refuse to expose admin without it
        if admin_config.ENV == "prod" and not admin_config.ADMIN_SECRET:
            raise RuntimeError("Unsafe configuration: ENABLE_ADMIN=true in PROD requires ADMIN_SECRET")
        app.include_router(admin_routers)      # mounts /api/v1/admin

    app.add_middleware(RequestIdMiddleware)
    register_all_exceptions(app)

    if admin_config.ENABLE_METRICS:
        from metrics.custom_instrumentator import instrumentator
        instrumentator.instrument(app).expose(app, endpoint="/metrics")

    return app

app=create_app()
