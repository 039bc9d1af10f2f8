from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
from sqlalchemy import func, insert, select, update
from metapay.common.utils import now
from metapay.schema.full_schema import Seller, SellerStatus

SELLER_COLUMNS = tuple(Seller.__table__.columns)


async def seller_id_by_email(session, email: str) -> Optional[int]:
    res = await session.execute(select(Seller.id).where(Seller.email == email))
    return res.scalar_one_or_none()


async def count_sellers(session) -> int:
    res = await session.execute(select(func.count()).select_from(Seller))
    return int(res.scalar_one())


async def insert_seller(session, *, email: str, business_name: str, url: Optional[str],
                        volume_estimate: Optional[float], api_key: str, coupon_code: str) -> int:
    stmt = (
        insert(Seller)
        .values(
            email=email,
            business_name=business_name,
            url=url,
            volume_estimate=volume_estimate,
            status=SellerStatus.PENDING.value,
            balance=0,
            api_key=api_key,
            coupon_code=coupon_code,
            created_at=now(),
            updated_at=now(),
        )
        .returning(Seller.id)
    )
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def _one_seller(session, *conditions) -> Optional[Dict[str, Any]]:
    res = await session.execute(select(*SELLER_COLUMNS).where(*conditions))
    row = res.mappings().one_or_none()
    return dict(row) if row else None


async def get_seller_by_id(session, seller_id: int) -> Optional[Dict[str, Any]]:
    return await _one_seller(session, Seller.id == seller_id)


async def get_seller_by_api_key(session, api_key: str) -> Optional[Dict[str, Any]]:
    return await _one_seller(session, Seller.api_key == api_key)


async def get_seller_by_coupon(session, coupon_code: str) -> Optional[Dict[str, Any]]:
    return await _one_seller(session, Seller.coupon_code == coupon_code)


async def set_seller_status(session, seller_id: int, from_status: SellerStatus, to_status: SellerStatus) -> bool:
    """compare-and-swap on status, False when the row was not in from_status"""
    stmt = (
        update(Seller)
        .where(Seller.id == seller_id, Seller.status == from_status.value)
        .values(status=to_status.value, updated_at=now())
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    return res.rowcount == 1


async def update_seller_wallets(session, seller_id: int, wallets: Dict[str, Optional[str]]):
    if not wallets:
        return
    values = {k: (v or None) for k, v in wallets.items()}
    stmt = (
        update(Seller)
        .where(Seller.id == seller_id)
        .values(**values, updated_at=now())
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    if res.rowcount == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Seller not found")


async def adjust_seller_balance(session, seller_id: int, delta_cents: int) -> bool:
    """
    Atomic balance += delta. Debits only apply while balance covers them,
    returns False when no row matched (unknown seller or not enough balance).
    """
    stmt = update(Seller).where(Seller.id == seller_id)
    if delta_cents < 0:
        stmt = stmt.where(Seller.balance >= -delta_cents)
    stmt = (
        stmt.values(balance=Seller.balance + delta_cents, updated_at=now())
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    return res.rowcount == 1


async def debit_seller_up_to(session, seller_id: int, cents: int) -> int:
    """Debit as much of `cents` as the balance covers, returns the amount actually taken."""
    res = await session.execute(select(Seller.balance).where(Seller.id == seller_id).with_for_update())
    balance = res.scalar_one_or_none()
    if not balance:
        return 0
    taken = min(balance, cents)
    if not await adjust_seller_balance(session, seller_id, -taken):
        return 0
    return taken


async def get_seller_balance(session, seller_id: int) -> Optional[int]:
    res = await session.execute(select(Seller.balance).where(Seller.id == seller_id))
    return res.scalar_one_or_none()


async def list_sellers(session, seller_status: Optional[str] = None) -> List[Dict[str, Any]]:
    stmt = select(*SELLER_COLUMNS)
    if seller_status:
        stmt = stmt.where(Seller.status == seller_status)
    stmt = stmt.order_by(Seller.created_at.desc(), Seller.id.desc())
    res = await session.execute(stmt)
    return [dict(r) for r in res.mappings().all()]
