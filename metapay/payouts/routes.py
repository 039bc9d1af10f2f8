from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from metapay.common.utils import pagination_meta, success_response
from metapay.db.dependencies import get_session
from metapay.payouts.constants import DEFAULT_PAYOUTS_PER_PAGE
from metapay.payouts.models import PayoutDecisionIn, PayoutRequestIn
from metapay.payouts.repository import list_all_payouts, list_seller_payouts
from metapay.payouts.services import decide_payout, request_payout
from metapay.payouts.utils import admin_payout_view, payout_view
from metapay.schema.full_schema import PayoutStatus
from metapay.sellers.dependencies import require_seller
from metapay.transactions.constants import MAX_PER_PAGE

payouts_router=APIRouter()
payouts_admin_router=APIRouter()


@payouts_router.post("/payouts")
async def create_payout(payload: PayoutRequestIn, seller=Depends(require_seller),
                        session: AsyncSession = Depends(get_session)):

    payout = await request_payout(session, seller, payload.crypto, payload.amount)
    return success_response(payout_view(payout),
                            message="Payout request submitted. Admin will process manually and approve.")


@payouts_router.get("/payouts")
async def list_payouts(page: int = Query(1, ge=1),
                       per_page: int = Query(DEFAULT_PAYOUTS_PER_PAGE, ge=1, le=MAX_PER_PAGE, alias="perPage"),
                       payout_status: Optional[PayoutStatus] = Query(None, alias="status"),
                       seller=Depends(require_seller), session: AsyncSession = Depends(get_session)):

    rows, total = await list_seller_payouts(session, seller["id"], page, per_page,
                                            payout_status.value if payout_status else None)
    return success_response([payout_view(r) for r in rows], pagination=pagination_meta(page, per_page, total))


@payouts_admin_router.get("/payouts")
async def admin_list_payouts(payout_status: Optional[PayoutStatus] = Query(None, alias="status"),
                             session: AsyncSession = Depends(get_session)):
    rows = await list_all_payouts(session, payout_status.value if payout_status else None)
    return success_response([admin_payout_view(r) for r in rows])


@payouts_admin_router.post("/payouts")
async def admin_decide_payout(payload: PayoutDecisionIn, session: AsyncSession = Depends(get_session)):
    decided = await decide_payout(session, payload.payout_id, payload.status, payload.admin_note)
    return success_response(message=f"Payout {decided} successfully")
