from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import func, insert, select, update
from metapay.common.utils import now
from metapay.schema.full_schema import Payout, PayoutStatus, Seller

PAYOUT_COLUMNS = tuple(Payout.__table__.columns)


async def insert_payout(session, *, seller_id: int, amount_usd: int, seller_fee: int, net_usd: int,
                        crypto: str, wallet_address: str) -> int:
    stmt = (
        insert(Payout)
        .values(
            seller_id=seller_id,
            amount_usd=amount_usd,
            seller_fee=seller_fee,
            net_usd=net_usd,
            crypto=crypto,
            wallet_address=wallet_address,
            status=PayoutStatus.PENDING.value,
            created_at=now(),
            updated_at=now(),
        )
        .returning(Payout.id)
    )
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def get_payout(session, payout_id: int) -> Optional[Dict[str, Any]]:
    res = await session.execute(select(*PAYOUT_COLUMNS).where(Payout.id == payout_id))
    row = res.mappings().one_or_none()
    return dict(row) if row else None


async def decide_payout_status(session, payout_id: int, to_status: PayoutStatus, admin_note: Optional[str]) -> bool:
    """pending -> approved|rejected, False if someone else already decided"""
    stmt = (
        update(Payout)
        .where(Payout.id == payout_id, Payout.status == PayoutStatus.PENDING.value)
        .values(status=to_status.value, admin_note=admin_note, updated_at=now())
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    return res.rowcount == 1


async def list_seller_payouts(session, seller_id: int, page: int, per_page: int,
                              payout_status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    conditions = [Payout.seller_id == seller_id]
    if payout_status:
        conditions.append(Payout.status == payout_status)

    total = (await session.execute(select(func.count()).select_from(Payout).where(*conditions))).scalar_one()
    stmt = (
        select(*PAYOUT_COLUMNS)
        .where(*conditions)
        .order_by(Payout.created_at.desc(), Payout.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    res = await session.execute(stmt)
    return [dict(r) for r in res.mappings().all()], int(total)


async def list_all_payouts(session, payout_status: Optional[str] = None) -> List[Dict[str, Any]]:
    stmt = (
        select(*PAYOUT_COLUMNS, Seller.email.label("seller_email"),
               Seller.business_name.label("seller_business_name"))
        .join(Seller, Seller.id == Payout.seller_id)
    )
    if payout_status:
        stmt = stmt.where(Payout.status == payout_status)
    stmt = stmt.order_by(Payout.created_at.desc(), Payout.id.desc())
    res = await session.execute(stmt)
    return [dict(r) for r in res.mappings().all()]
