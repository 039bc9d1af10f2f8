from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from metapay.common.utils import success_response
from metapay.config.admin_config import admin_config
from metapay.config.settings import config_settings
from metapay.db.dependencies import get_session
from metapay.common.logging_setup import get_logger

logger = get_logger("metapay.app")

home_router = APIRouter()


@home_router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(select(1))
    except SQLAlchemyError:
        logger.exception("health.db_unreachable")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database connection error")

    return {"status": "healthy"}


@home_router.get("/test")
async def config_check():
    """Presence flags only, never values."""
    return success_response(
        message="API is working",
        env={
            "hasDatabaseUrl": bool(config_settings.DATABASE_URL),
            "hasSellAuthToken": bool(config_settings.SELLAUTH_TOKEN),
            "hasMasterShopId": bool(config_settings.MASTER_SHOP_ID),
            "hasDummyProduct": bool(config_settings.DUMMY_PRODUCT_ID and config_settings.DUMMY_VARIANT_ID),
            "hasAdminSecret": bool(admin_config.ADMIN_SECRET),
        },
    )
