from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from metapay.common.utils import now, to_cents, to_decimal
from metapay.config.settings import config_settings
from metapay.fees.constants import FeeRole
from metapay.fees.repository import resolve_fee_rate
from metapay.fees.utils import quantize_usd, surcharge
from metapay.processor.client import GatewayError, ProcessorClient
from metapay.processor.models import CheckoutResult, InvoiceDetails
from metapay.schema.full_schema import TransactionStatus
from metapay.sellers.repository import adjust_seller_balance, debit_seller_up_to, get_seller_balance
from metapay.transactions.constants import FALLBACK_USER_AGENT, MIN_CART_QUANTITY, REFUNDABLE_FROM, logger
from metapay.transactions.models import PaymentCreateIn
from metapay.transactions.repository import get_transaction_by_invoice, insert_transaction, transition_status
from metapay.transactions.utils import cart_quantity


async def create_payment(session, processor: ProcessorClient, seller: Dict[str, Any],
                         payload: PaymentCreateIn, user_agent: Optional[str] = None) -> CheckoutResult:

    rate = await resolve_fee_rate(session, FeeRole.CUSTOMER, seller["id"])
    fee = surcharge(payload.amount, rate)
    total = to_decimal(payload.amount) + fee

    quantity = cart_quantity(total)
    if quantity < MIN_CART_QUANTITY:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Amount too low after fee calculation")

    cart = [{
        "product_id": config_settings.DUMMY_PRODUCT_ID,
        "variant_id": config_settings.DUMMY_VARIANT_ID,
        "quantity": quantity,
    }]

    logger.info("payment.checkout.start", extra={"seller_id": seller["id"], "amount": str(payload.amount),
                                                 "quantity": quantity, "coupon_code": seller["coupon_code"]})

    checkout = await processor.create_checkout(
        cart=cart,
        email=payload.customer_email,
        coupon=seller["coupon_code"],
        ip=config_settings.CHECKOUT_CUSTOMER_IP,
        user_agent=user_agent or FALLBACK_USER_AGENT,
        gateway=config_settings.SELLAUTH_GATEWAY,
    )

    amount_cents = to_cents(payload.amount)
    try:
        await insert_transaction(
            session,
            seller_id=seller["id"],
            invoice_id=checkout.invoice_id,
            amount=amount_cents,
            customer_fee=to_cents(quantize_usd(fee)),
            net_to_seller=amount_cents,
            description=payload.description,
        )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.error("payment.record.integrity_error", extra={"invoice_id": checkout.invoice_id})
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create transaction record")

    logger.info("payment.created", extra={"seller_id": seller["id"], "invoice_id": checkout.invoice_id})
    return checkout


# ledger transitions below run inside the caller's transaction, the caller commits

async def mark_completed(session, tx: Dict[str, Any]) -> bool:
    swapped = await transition_status(session, tx["id"], [TransactionStatus.PENDING],
                                      TransactionStatus.COMPLETED, completed_at=now())
    if not swapped:
        return False
    await adjust_seller_balance(session, tx["seller_id"], tx["net_to_seller"])
    return True


async def mark_refunded(session, tx: Dict[str, Any]) -> Optional[int]:
    """
    Move the transaction to refunded and take `net_to_seller` back from the seller.
    Returns None when no transition applied, otherwise the shortfall in cents
    (the part of the refund the balance could not cover, 0 when fully debited).
    The transition itself never depends on the balance.
    """
    swapped = await transition_status(session, tx["id"], [TransactionStatus.COMPLETED], TransactionStatus.REFUNDED)
    if swapped:
        taken = await debit_seller_up_to(session, tx["seller_id"], tx["net_to_seller"])
        shortfall = tx["net_to_seller"] - taken
        if shortfall:
            logger.warning("refund.balance_shortfall", extra={"invoice_id": tx["invoice_id"], "seller_id": tx["seller_id"],
                                                              "debited_cents": taken, "shortfall_cents": shortfall})
        return shortfall

    # never credited, nothing to take back
    if await transition_status(session, tx["id"], [TransactionStatus.PENDING], TransactionStatus.REFUNDED):
        return 0
    return None


async def mark_failed(session, tx: Dict[str, Any]) -> bool:
    return await transition_status(session, tx["id"], [TransactionStatus.PENDING], TransactionStatus.FAILED)


async def refund_transaction(session, processor: ProcessorClient, seller: Dict[str, Any],
                             invoice_id: str, reason: Optional[str] = None):

    tx = await get_transaction_by_invoice(session, invoice_id)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    if tx["seller_id"] != seller["id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your transaction")
    if tx["status"] not in [s.value for s in REFUNDABLE_FROM]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Can only refund completed payments")

    balance = await get_seller_balance(session, seller["id"])
    if balance is None or balance < tx["net_to_seller"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Insufficient balance to cover refund")

    await processor.refund_invoice(invoice_id, reason)

    shortfall = await mark_refunded(session, tx)
    await session.commit()

    logger.info("refund.initiated", extra={"invoice_id": invoice_id, "seller_id": seller["id"],
                                           "reason": reason or "No reason provided",
                                           "applied": shortfall is not None, "shortfall_cents": shortfall or 0})


async def fetch_invoice_details(processor: ProcessorClient, invoice_id: str) -> Optional[InvoiceDetails]:
    """Best effort, the local row is the source of truth."""
    try:
        return await processor.get_invoice(invoice_id)
    except (GatewayError, ValidationError) as exc:
        logger.warning("invoice.details.unavailable", extra={"invoice_id": invoice_id, "error": str(exc)})
        return None
