from typing import Dict, Optional
from fastapi import HTTPException, status
from sqlalchemy import select, update
from metapay.common.utils import now
from metapay.fees.constants import CONFIG_ROW_ID, DEFAULT_CUSTOMER_FEE, DEFAULT_SELLER_FEE, FeeRole
from metapay.schema.full_schema import FeeConfig, Seller


async def get_fee_config(session) -> Dict[str, float]:
    stmt = select(FeeConfig.customer_fee, FeeConfig.seller_fee).where(FeeConfig.id == CONFIG_ROW_ID)
    res = await session.execute(stmt)
    row = res.one_or_none()
    if row is None:
        return {"customer_fee": DEFAULT_CUSTOMER_FEE, "seller_fee": DEFAULT_SELLER_FEE}
    return {
        "customer_fee": row.customer_fee if row.customer_fee is not None else DEFAULT_CUSTOMER_FEE,
        "seller_fee": row.seller_fee if row.seller_fee is not None else DEFAULT_SELLER_FEE,
    }


async def upsert_fee_config(session, customer_fee: Optional[float], seller_fee: Optional[float]):
    # omitted fields fall back to the defaults, not to the stored values
    row = FeeConfig(
        id=CONFIG_ROW_ID,
        customer_fee=customer_fee if customer_fee is not None else DEFAULT_CUSTOMER_FEE,
        seller_fee=seller_fee if seller_fee is not None else DEFAULT_SELLER_FEE,
        updated_at=now(),
    )
    await session.merge(row)


async def set_seller_fee_overrides(session, seller_id: int, overrides: Dict[str, Optional[float]]):
    """Only the given keys are written, an explicit None clears that override."""
    values = {f"custom_{name}": rate for name, rate in overrides.items()}
    stmt = (
        update(Seller)
        .where(Seller.id == seller_id)
        .values(**values, updated_at=now())
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    if res.rowcount == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Seller not found")


def pick_fee_rate(role: FeeRole, seller_override: Optional[float], config: Dict[str, float]) -> float:
    """seller override -> global config -> default"""
    if seller_override is not None:
        return seller_override
    if role == FeeRole.CUSTOMER:
        return config.get("customer_fee", DEFAULT_CUSTOMER_FEE)
    return config.get("seller_fee", DEFAULT_SELLER_FEE)


async def resolve_fee_rate(session, role: FeeRole, seller_id: int) -> float:
    column = Seller.custom_customer_fee if role == FeeRole.CUSTOMER else Seller.custom_seller_fee
    res = await session.execute(select(column).where(Seller.id == seller_id))
    override = res.scalar_one_or_none()
    config = await get_fee_config(session)
    return pick_fee_rate(role, override, config)
