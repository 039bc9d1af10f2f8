from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from metapay.common.utils import success_response
from metapay.db.dependencies import get_session
from metapay.processor.client import ProcessorClient, get_processor
from metapay.schema.full_schema import SellerStatus
from metapay.sellers.constants import logger
from metapay.sellers.dependencies import require_seller
from metapay.sellers.models import ApproveSellerIn, ProfileUpdateIn, SellerRegisterIn
from metapay.sellers.repository import get_seller_by_id, list_sellers, update_seller_wallets
from metapay.sellers.services import approve_seller, build_profile, register_seller
from metapay.sellers.utils import seller_admin_view

sellers_router=APIRouter()
sellers_admin_router=APIRouter()


@sellers_router.post("/sellers/register")
async def register(payload: SellerRegisterIn, session: AsyncSession = Depends(get_session),
                   processor: ProcessorClient = Depends(get_processor)):

    seller_id = await register_seller(session, processor, payload)
    return success_response({"seller_id": seller_id}, status_code=status.HTTP_201_CREATED,
                            message="Registration successful! Your account is pending approval.")


@sellers_router.get("/profile")
async def get_profile(seller=Depends(require_seller), session: AsyncSession = Depends(get_session)):
    profile = await build_profile(session, seller)
    return success_response(profile)


@sellers_router.put("/profile")
async def update_profile(payload: ProfileUpdateIn, seller=Depends(require_seller),
                         session: AsyncSession = Depends(get_session)):

    wallets = payload.model_dump(exclude_unset=True)
    await update_seller_wallets(session, seller["id"], wallets)
    await session.commit()
    logger.info("seller.wallets.updated", extra={"seller_id": seller["id"], "fields": sorted(wallets)})

    fresh = await get_seller_by_id(session, seller["id"])
    profile = await build_profile(session, fresh)
    return success_response(profile, message="Profile updated successfully")


@sellers_admin_router.get("/sellers")
async def admin_list_sellers(seller_status: Optional[SellerStatus] = Query(None, alias="status"),
                             session: AsyncSession = Depends(get_session)):

    rows = await list_sellers(session, seller_status.value if seller_status else None)
    return success_response([seller_admin_view(r) for r in rows])


@sellers_admin_router.post("/approve-seller")
async def admin_approve_seller(payload: ApproveSellerIn, session: AsyncSession = Depends(get_session)):
    result = await approve_seller(session, payload.seller_id)
    return success_response(message="Seller approved successfully", apiKey=result["api_key"])
