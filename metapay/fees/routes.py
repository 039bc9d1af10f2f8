from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from metapay.common.utils import success_response
from metapay.db.dependencies import get_session
from metapay.fees.constants import logger
from metapay.fees.models import FeeUpdateIn
from metapay.fees.repository import get_fee_config, set_seller_fee_overrides, upsert_fee_config

fees_admin_router=APIRouter()


@fees_admin_router.get("/config/fees")
async def read_fee_config(session: AsyncSession = Depends(get_session)):
    config = await get_fee_config(session)
    return success_response({"customerFee": config["customer_fee"], "sellerFee": config["seller_fee"]})


@fees_admin_router.post("/config/fees")
async def update_fee_config(payload: FeeUpdateIn, session: AsyncSession = Depends(get_session)):

    if payload.seller_id:
        overrides = payload.model_dump(exclude_unset=True, include={"customer_fee", "seller_fee"})
        await set_seller_fee_overrides(session, payload.seller_id, overrides)
        await session.commit()
        logger.info("fees.seller_override.updated", extra={"seller_id": payload.seller_id, **overrides})
    else:
        await upsert_fee_config(session, payload.customer_fee, payload.seller_fee)
        await session.commit()
        logger.info("fees.global.updated", extra={"customer_fee": payload.customer_fee,
                                                  "seller_fee": payload.seller_fee})

    return success_response(message="Fees updated successfully")
