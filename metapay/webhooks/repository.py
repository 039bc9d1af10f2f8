from typing import Any, Dict, Optional
from sqlalchemy import insert, update
from metapay.common.utils import now
from metapay.schema.full_schema import WebhookEvent, WebhookEventStatus
from metapay.webhooks.constants import LAST_ERROR_MAX_LEN, PROVIDER


async def record_webhook_event(session, *, event: Optional[str], invoice_id: Optional[str],
                               coupon_code: Optional[str], payload: Optional[Dict[str, Any]],
                               ev_status: WebhookEventStatus = WebhookEventStatus.RECEIVED,
                               last_error: Optional[str] = None) -> int:
    stmt = (
        insert(WebhookEvent)
        .values(
            provider=PROVIDER,
            event=event,
            invoice_id=invoice_id,
            coupon_code=coupon_code,
            payload=payload,
            status=ev_status.value,
            last_error=last_error,
            received_at=now(),
        )
        .returning(WebhookEvent.id)
    )
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def finish_webhook_event(session, ev_id: int, ev_status: WebhookEventStatus, last_error: Optional[str] = None):
    stmt = (
        update(WebhookEvent)
        .where(WebhookEvent.id == ev_id)
        .values(status=ev_status.value,
                last_error=last_error[:LAST_ERROR_MAX_LEN] if last_error else None,
                processed_at=now())
        .execution_options(synchronize_session=False)
    )
    await session.execute(stmt)
