from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from sqlalchemy import func, insert, select, update
from metapay.common.utils import now
from metapay.schema.full_schema import Seller, Transaction, TransactionStatus

TRANSACTION_COLUMNS = tuple(Transaction.__table__.columns)


async def insert_transaction(session, *, seller_id: int, invoice_id: str, amount: int, customer_fee: int,
                             net_to_seller: int, description: Optional[str] = None,
                             tx_status: TransactionStatus = TransactionStatus.PENDING) -> int:
    stmt = (
        insert(Transaction)
        .values(
            seller_id=seller_id,
            invoice_id=invoice_id,
            amount=amount,
            customer_fee=customer_fee,
            net_to_seller=net_to_seller,
            status=tx_status.value,
            description=description,
            created_at=now(),
            updated_at=now(),
        )
        .returning(Transaction.id)
    )
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def get_transaction_by_invoice(session, invoice_id: str) -> Optional[Dict[str, Any]]:
    res = await session.execute(select(*TRANSACTION_COLUMNS).where(Transaction.invoice_id == invoice_id))
    row = res.mappings().one_or_none()
    return dict(row) if row else None


async def transition_status(session, tx_id: int, from_statuses: Iterable[TransactionStatus],
                            to_status: TransactionStatus, completed_at: Optional[datetime] = None) -> bool:
    """
    Compare-and-swap on the status column.
    Only one of several concurrent callers sees True for the same row and source status.
    """
    values: Dict[str, Any] = {"status": to_status.value, "updated_at": now()}
    if completed_at is not None:
        values["completed_at"] = completed_at
    stmt = (
        update(Transaction)
        .where(Transaction.id == tx_id, Transaction.status.in_([s.value for s in from_statuses]))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    return res.rowcount == 1


async def list_seller_transactions(session, seller_id: int, page: int, per_page: int,
                                   tx_status: Optional[str] = None, start_date: Optional[datetime] = None,
                                   end_date: Optional[datetime] = None) -> Tuple[List[Dict[str, Any]], int]:

    conditions = [Transaction.seller_id == seller_id]
    if tx_status:
        conditions.append(Transaction.status == tx_status)
    if start_date:
        conditions.append(Transaction.created_at >= start_date)
    if end_date:
        conditions.append(Transaction.created_at <= end_date)

    total = (await session.execute(select(func.count()).select_from(Transaction).where(*conditions))).scalar_one()

    stmt = (
        select(*TRANSACTION_COLUMNS)
        .where(*conditions)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    res = await session.execute(stmt)
    return [dict(r) for r in res.mappings().all()], int(total)


async def list_all_transactions(session, page: int, per_page: int, tx_status: Optional[str] = None,
                                seller_id: Optional[int] = None) -> Tuple[List[Dict[str, Any]], int]:

    conditions = []
    if tx_status:
        conditions.append(Transaction.status == tx_status)
    if seller_id:
        conditions.append(Transaction.seller_id == seller_id)

    total = (await session.execute(select(func.count()).select_from(Transaction).where(*conditions))).scalar_one()

    stmt = (
        select(*TRANSACTION_COLUMNS, Seller.email.label("seller_email"),
               Seller.business_name.label("seller_business_name"))
        .join(Seller, Seller.id == Transaction.seller_id)
        .where(*conditions)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    res = await session.execute(stmt)
    return [dict(r) for r in res.mappings().all()], int(total)
