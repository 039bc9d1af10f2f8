from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from metapay.admin.constants import UNAUTHORIZED_DETAIL, logger
from metapay.admin.utils import decode_admin_token

admin_bearer = HTTPBearer(auto_error=False)


async def require_admin(creds: Optional[HTTPAuthorizationCredentials] = Depends(admin_bearer)):
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=UNAUTHORIZED_DETAIL)

    claims = decode_admin_token(creds.credentials)
    if claims is None:
        logger.warning("admin.auth.invalid_token")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=UNAUTHORIZED_DETAIL)
    return claims
