from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from metapay.common.utils import success_response
from metapay.db.dependencies import get_session
from metapay.schema.full_schema import WebhookEventStatus
from metapay.webhooks.constants import logger
from metapay.webhooks.repository import record_webhook_event
from metapay.webhooks.services import ingest_event, verify_source_ip
from metapay.webhooks.utils import client_ip

webhooks_router=APIRouter()


@webhooks_router.post("/webhooks/sellauth")
async def sellauth_webhook(request: Request, session: AsyncSession = Depends(get_session)):

    # the only non 200 answer
    verify_source_ip(client_ip(request))

    try:
        try:
            body = await request.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            logger.warning("sellauth.webhook.bad_payload")
            await record_webhook_event(session, event=None, invoice_id=None, coupon_code=None, payload=None,
                                       ev_status=WebhookEventStatus.INCONSISTENT, last_error="unparseable payload")
            await session.commit()
            return success_response(message="Invalid payload")

        outcome, note = await ingest_event(session, body)

    except Exception:
        # acknowledged anyway, the event row (if any) carries the reconciliation state
        logger.exception("sellauth.webhook.unhandled")
        return success_response()

    if note and outcome != WebhookEventStatus.ERRORED:
        return success_response(message=note)
    return success_response()
