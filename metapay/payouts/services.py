from decimal import Decimal
from typing import Any, Dict, Optional
from fastapi import HTTPException, status
from metapay.common.utils import to_cents
from metapay.fees.constants import FeeRole
from metapay.fees.repository import resolve_fee_rate
from metapay.fees.utils import deduction, quantize_usd
from metapay.payouts.constants import MIN_PAYOUT_CENTS, logger
from metapay.payouts.repository import decide_payout_status, get_payout, insert_payout
from metapay.schema.full_schema import PayoutCrypto, PayoutStatus
from metapay.sellers.repository import adjust_seller_balance, get_seller_balance
from metapay.sellers.utils import wallet_for


async def request_payout(session, seller: Dict[str, Any], crypto: str, amount: Optional[Decimal] = None) -> Dict[str, Any]:
    """
    Reserve `amount` (full balance when omitted) for a crypto payout.
    The debit and the pending payout row are committed together.
    """
    balance = await get_seller_balance(session, seller["id"]) or 0
    amount_cents = to_cents(amount) if amount is not None else balance

    if amount_cents > balance:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Insufficient balance")
    if amount_cents < MIN_PAYOUT_CENTS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Minimum payout is $10")

    crypto_type = PayoutCrypto(crypto)
    wallet = wallet_for(seller, crypto_type)
    if not wallet:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"No {crypto_type.value} wallet configured")

    rate = await resolve_fee_rate(session, FeeRole.SELLER, seller["id"])
    fee_cents = to_cents(quantize_usd(deduction(Decimal(amount_cents) / 100, rate)))
    net_cents = amount_cents - fee_cents

    payout_id = await insert_payout(
        session,
        seller_id=seller["id"],
        amount_usd=amount_cents,
        seller_fee=fee_cents,
        net_usd=net_cents,
        crypto=crypto_type.value,
        wallet_address=wallet,
    )
    # guarded debit, a concurrent payout may have drained the balance since the read above
    debited = await adjust_seller_balance(session, seller["id"], -amount_cents)
    if not debited:
        await session.rollback()
        logger.warning("payout.request.lost_race", extra={"seller_id": seller["id"], "amount_cents": amount_cents})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Insufficient balance")

    await session.commit()
    logger.info("payout.request.success", extra={"seller_id": seller["id"], "payout_id": payout_id,
                                                 "amount_cents": amount_cents, "crypto": crypto_type.value,
                                                 "wallet": wallet})
    return await get_payout(session, payout_id)


async def decide_payout(session, payout_id: int, decision: str, admin_note: Optional[str] = None) -> str:
    payout = await get_payout(session, payout_id)
    if not payout:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payout not found")
    if payout["status"] != PayoutStatus.PENDING.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payout already processed")

    to_status = PayoutStatus(decision)
    swapped = await decide_payout_status(session, payout_id, to_status, admin_note)
    if not swapped:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payout already processed")

    if to_status == PayoutStatus.REJECTED:
        await adjust_seller_balance(session, payout["seller_id"], payout["amount_usd"])

    await session.commit()
    logger.info("payout.decided", extra={"payout_id": payout_id, "status": to_status.value,
                                         "seller_id": payout["seller_id"]})
    return to_status.value
