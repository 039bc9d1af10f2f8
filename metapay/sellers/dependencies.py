from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from metapay.db.dependencies import get_session
from metapay.schema.full_schema import SellerStatus
from metapay.sellers.constants import API_KEY_PREFIX, logger
from metapay.sellers.repository import get_seller_by_api_key

seller_bearer = HTTPBearer(auto_error=False)


async def require_seller(creds: Optional[HTTPAuthorizationCredentials] = Depends(seller_bearer),
                         session: AsyncSession = Depends(get_session)) -> Dict[str, Any]:
    """Resolve the calling seller from `Authorization: Bearer <api key>`."""
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing or invalid authorization header")

    api_key = creds.credentials.strip()
    if not api_key.startswith(API_KEY_PREFIX):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    seller = await get_seller_by_api_key(session, api_key)
    if not seller:
        logger.warning("seller.auth.unknown_key")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    if seller["status"] != SellerStatus.APPROVED.value:
        logger.warning("seller.auth.not_approved", extra={"seller_id": seller["id"], "status": seller["status"]})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account not approved")

    return seller
