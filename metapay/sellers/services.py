from typing import Any, Dict
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from metapay.common.utils import from_cents
from metapay.fees.constants import FeeRole
from metapay.fees.repository import get_fee_config, pick_fee_rate
from metapay.processor.client import GatewayError, ProcessorClient
from metapay.processor.constants import COUPON_MAX_ATTEMPTS
from metapay.schema.full_schema import SellerStatus
from metapay.sellers.constants import logger
from metapay.sellers.models import SellerRegisterIn
from metapay.sellers.repository import count_sellers, get_seller_by_id, insert_seller, seller_id_by_email, set_seller_status
from metapay.sellers.utils import generate_api_key, generate_coupon_code, mask_api_key


async def provision_coupon(processor: ProcessorClient, index: int) -> str:
    """
    Create the seller's linkage coupon on the processor.
    Collisions re-derive the code with a bumped index, anything else is fatal.
    """
    for attempt in range(COUPON_MAX_ATTEMPTS):
        code = generate_coupon_code(index + attempt)
        try:
            await processor.create_coupon(code)
            return code
        except GatewayError as exc:
            if not exc.is_conflict:
                raise
            logger.warning("seller.coupon.collision", extra={"coupon_code": code, "attempt": attempt + 1})

    logger.error("seller.coupon.exhausted", extra={"attempts": COUPON_MAX_ATTEMPTS})
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        detail=f"Failed to create unique coupon after {COUPON_MAX_ATTEMPTS} attempts")


async def register_seller(session, processor: ProcessorClient, payload: SellerRegisterIn) -> int:

    if await seller_id_by_email(session, payload.email):
        logger.warning("seller.duplicate", extra={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    api_key = generate_api_key()
    index = await count_sellers(session) + 1

    # coupon must exist on the processor before the row is written
    coupon_code = await provision_coupon(processor, index)

    try:
        seller_id = await insert_seller(
            session,
            email=payload.email,
            business_name=payload.business_name,
            url=str(payload.url) if payload.url else None,
            volume_estimate=payload.volume_estimate,
            api_key=api_key,
            coupon_code=coupon_code,
        )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.warning("seller.create.integrity_error", extra={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    logger.info("seller.created", extra={"seller_id": seller_id, "email": payload.email, "coupon_code": coupon_code})
    return seller_id


async def approve_seller(session, seller_id: int) -> Dict[str, Any]:
    seller = await get_seller_by_id(session, seller_id)
    if not seller:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Seller not found")

    swapped = await set_seller_status(session, seller_id, SellerStatus.PENDING, SellerStatus.APPROVED)
    if not swapped:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Seller already approved or invalid status")

    await session.commit()
    logger.info("seller.approved", extra={"seller_id": seller_id})
    return {"seller_id": seller_id, "api_key": seller["api_key"]}


async def build_profile(session, seller: Dict[str, Any]) -> Dict[str, Any]:
    config = await get_fee_config(session)
    return {
        "id": seller["id"],
        "email": seller["email"],
        "business_name": seller["business_name"],
        "url": seller["url"],
        "api_key": mask_api_key(seller["api_key"]),
        "coupon_code": seller["coupon_code"],
        "usdc_sol_wallet": seller["usdc_sol_wallet"],
        "usdc_bsc_wallet": seller["usdc_bsc_wallet"],
        "ltc_wallet": seller["ltc_wallet"],
        "balance": from_cents(seller["balance"]),
        "customer_fee": pick_fee_rate(FeeRole.CUSTOMER, seller["custom_customer_fee"], config),
        "seller_fee": pick_fee_rate(FeeRole.SELLER, seller["custom_seller_fee"], config),
        "status": seller["status"],
        "created_at": seller["created_at"],
    }
