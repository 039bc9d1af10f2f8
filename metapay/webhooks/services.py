from typing import Any, Dict, Optional, Tuple
from fastapi import HTTPException, status
from metapay.config.settings import config_settings
from metapay.schema.full_schema import TransactionStatus, WebhookEventStatus
from metapay.sellers.repository import get_seller_by_coupon
from metapay.transactions.constants import AUTO_SYNC_DESCRIPTION
from metapay.transactions.repository import get_transaction_by_invoice, insert_transaction
from metapay.transactions.services import mark_completed, mark_failed, mark_refunded
from metapay.webhooks.constants import COMPLETION_EVENTS, FAILURE_EVENTS, REFUND_EVENTS, REFUND_SHORTFALL_NOTE, logger
from metapay.webhooks.repository import finish_webhook_event, record_webhook_event
from metapay.webhooks.utils import as_text, extract_invoice, invoice_id_of, synced_amount_cents


def verify_source_ip(ip: Optional[str]):
    allowed = config_settings.sellauth_allowed_ips
    if allowed and ip and ip not in allowed:
        logger.warning("sellauth.webhook.unauthorized_ip", extra={"ip": ip})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized webhook source")


async def apply_event(session, event: Optional[str], tx: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Map one processor event onto the ledger. Returns (changed, note), changed is False
    for a duplicate or unknown event. The note flags a refund the balance could not fully cover.
    """
    if event in COMPLETION_EVENTS:
        return await mark_completed(session, tx), None
    if event in REFUND_EVENTS:
        shortfall = await mark_refunded(session, tx)
        if shortfall:
            return True, REFUND_SHORTFALL_NOTE.format(cents=shortfall)
        return shortfall is not None, None
    if event in FAILURE_EVENTS:
        return await mark_failed(session, tx), None
    return False, None


async def _resolve_transaction(session, event: Optional[str], invoice_id: str, seller: Dict[str, Any],
                               invoice: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    tx = await get_transaction_by_invoice(session, invoice_id)
    if tx is None and event in COMPLETION_EVENTS:
        # payment made outside our checkout flow, adopt it
        amount = synced_amount_cents(invoice)
        await insert_transaction(
            session,
            seller_id=seller["id"],
            invoice_id=invoice_id,
            amount=amount,
            customer_fee=0,
            net_to_seller=amount,
            description=AUTO_SYNC_DESCRIPTION,
            tx_status=TransactionStatus.PENDING,
        )
        logger.info("sellauth.webhook.auto_synced", extra={"invoice_id": invoice_id, "seller_id": seller["id"],
                                                           "amount_cents": amount})
        tx = await get_transaction_by_invoice(session, invoice_id)
    return tx


async def ingest_event(session, body: Dict[str, Any]) -> Tuple[WebhookEventStatus, Optional[str]]:
    """
    Record the callback, then apply it. Never raises, the outcome is stored on the event row
    and returned as (status, note).
    """
    event = as_text(body.get("event"))
    invoice = extract_invoice(body)
    invoice_id = invoice_id_of(invoice)
    coupon_code = as_text(invoice.get("coupon_code"))

    ev_id = await record_webhook_event(session, event=event, invoice_id=invoice_id,
                                       coupon_code=coupon_code, payload=body)
    await session.commit()

    logger.info("sellauth.webhook.received", extra={"event": event, "invoice_id": invoice_id, "webhook_event_id": ev_id})

    try:
        outcome, note = await _process(session, event, invoice, invoice_id, coupon_code)
        await finish_webhook_event(session, ev_id, outcome, last_error=note)
        await session.commit()
        return outcome, note

    except Exception as exc:
        logger.exception("sellauth.webhook.processing_failed",
                         extra={"event": event, "invoice_id": invoice_id, "webhook_event_id": ev_id})
        await session.rollback()
        try:
            await finish_webhook_event(session, ev_id, WebhookEventStatus.ERRORED, last_error=repr(exc))
            await session.commit()
        except Exception as rec_err:
            logger.error("sellauth.webhook.record_error_failure",
                         exc_info=(type(rec_err), rec_err, rec_err.__traceback__),
                         extra={"webhook_event_id": ev_id})
        return WebhookEventStatus.ERRORED, None


async def _process(session, event: Optional[str], invoice: Dict[str, Any], invoice_id: Optional[str],
                   coupon_code: Optional[str]) -> Tuple[WebhookEventStatus, Optional[str]]:

    if not invoice_id:
        logger.warning("sellauth.webhook.missing_invoice_id", extra={"event": event})
        return WebhookEventStatus.INCONSISTENT, "No invoice ID"

    seller = await get_seller_by_coupon(session, coupon_code) if coupon_code else None
    if not seller:
        logger.warning("sellauth.webhook.unknown_coupon", extra={"coupon_code": coupon_code, "invoice_id": invoice_id})
        return WebhookEventStatus.INCONSISTENT, "Unknown coupon"

    tx = await _resolve_transaction(session, event, invoice_id, seller, invoice)
    if not tx:
        logger.warning("sellauth.webhook.transaction_not_found", extra={"invoice_id": invoice_id, "event": event})
        return WebhookEventStatus.INCONSISTENT, "Transaction not found"

    if tx["seller_id"] != seller["id"]:
        logger.warning("sellauth.webhook.seller_mismatch", extra={"invoice_id": invoice_id, "coupon_code": coupon_code,
                                                                  "tx_seller_id": tx["seller_id"]})
        return WebhookEventStatus.INCONSISTENT, "Coupon does not match transaction seller"

    changed, note = await apply_event(session, event, tx)
    if not changed:
        logger.info("sellauth.webhook.no_transition", extra={"invoice_id": invoice_id, "event": event,
                                                             "tx_status": tx["status"]})
        return WebhookEventStatus.IGNORED, "No applicable transition"

    logger.info("sellauth.webhook.applied", extra={"invoice_id": invoice_id, "event": event,
                                                   "seller_id": seller["id"], "net_cents": tx["net_to_seller"]})
    return WebhookEventStatus.PROCESSED, note
