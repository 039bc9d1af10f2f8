from typing import Optional
from fastapi import APIRouter, Header, HTTPException, status
from metapay.admin.constants import UNAUTHORIZED_DETAIL, logger
from metapay.admin.utils import create_admin_token, secret_matches
from metapay.common.utils import success_response

admin_auth_router=APIRouter()


@admin_auth_router.post("/verify")
async def verify_admin(x_admin_secret: Optional[str] = Header(None, alias="X-Admin-Secret")):

    if not secret_matches(x_admin_secret):
        logger.warning("admin.verify.failed")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=UNAUTHORIZED_DETAIL)

    issued = create_admin_token()
    logger.info("admin.verify.success")
    return success_response({"token": issued["token"], "token_type": "bearer", "expires_at": issued["expires_at"]},
                            message="Admin verified")
