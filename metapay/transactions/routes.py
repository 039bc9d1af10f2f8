from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from metapay.common.utils import pagination_meta, success_response
from metapay.db.dependencies import get_session
from metapay.processor.client import ProcessorClient, get_processor
from metapay.schema.full_schema import TransactionStatus
from metapay.sellers.dependencies import require_seller
from metapay.transactions.constants import DEFAULT_ADMIN_PER_PAGE, DEFAULT_INVOICES_PER_PAGE, MAX_PER_PAGE
from metapay.transactions.models import PaymentCreateIn, RefundIn
from metapay.transactions.repository import get_transaction_by_invoice, list_all_transactions, list_seller_transactions
from metapay.transactions.services import create_payment, fetch_invoice_details, refund_transaction
from metapay.transactions.utils import admin_transaction_view, invoice_view, transaction_view

payments_router=APIRouter()
transactions_admin_router=APIRouter()


@payments_router.post("/payments")
async def create_payment_route(request: Request, payload: PaymentCreateIn, seller=Depends(require_seller),
                               session: AsyncSession = Depends(get_session),
                               processor: ProcessorClient = Depends(get_processor)):

    checkout = await create_payment(session, processor, seller, payload, request.headers.get("user-agent"))
    return success_response(checkout_url=checkout.checkout_url, invoice_id=checkout.invoice_id)


@payments_router.get("/invoices")
async def list_invoices(page: int = Query(1, ge=1),
                        per_page: int = Query(DEFAULT_INVOICES_PER_PAGE, ge=1, le=MAX_PER_PAGE, alias="perPage"),
                        tx_status: Optional[TransactionStatus] = Query(None, alias="status"),
                        start_date: Optional[datetime] = Query(None, alias="startDate"),
                        end_date: Optional[datetime] = Query(None, alias="endDate"),
                        seller=Depends(require_seller), session: AsyncSession = Depends(get_session)):

    rows, total = await list_seller_transactions(session, seller["id"], page, per_page,
                                                 tx_status.value if tx_status else None, start_date, end_date)
    return success_response([transaction_view(r) for r in rows], pagination=pagination_meta(page, per_page, total))


@payments_router.get("/invoices/{invoice_id}")
async def get_invoice(invoice_id: str, seller=Depends(require_seller), session: AsyncSession = Depends(get_session),
                      processor: ProcessorClient = Depends(get_processor)):

    tx = await get_transaction_by_invoice(session, invoice_id)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    if tx["seller_id"] != seller["id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized access to invoice")

    details = await fetch_invoice_details(processor, invoice_id)
    return success_response(invoice_view(tx, details))


@payments_router.post("/refunds/{invoice_id}")
async def refund_invoice(invoice_id: str, payload: Optional[RefundIn] = None, seller=Depends(require_seller),
                         session: AsyncSession = Depends(get_session),
                         processor: ProcessorClient = Depends(get_processor)):

    reason = payload.reason if payload else None
    await refund_transaction(session, processor, seller, invoice_id, reason)
    return success_response(message="Refund initiated successfully")


@transactions_admin_router.get("/transactions")
async def admin_list_transactions(page: int = Query(1, ge=1),
                                  per_page: int = Query(DEFAULT_ADMIN_PER_PAGE, ge=1, le=MAX_PER_PAGE, alias="perPage"),
                                  tx_status: Optional[TransactionStatus] = Query(None, alias="status"),
                                  seller_id: Optional[int] = Query(None, gt=0, alias="sellerId"),
                                  session: AsyncSession = Depends(get_session)):

    rows, total = await list_all_transactions(session, page, per_page,
                                              tx_status.value if tx_status else None, seller_id)
    return success_response([admin_transaction_view(r) for r in rows], pagination=pagination_meta(page, per_page, total))
