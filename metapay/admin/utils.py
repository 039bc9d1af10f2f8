import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from metapay.admin.constants import ADMIN_SUBJECT
from metapay.config.admin_config import admin_config


def _signing_key() -> Optional[str]:
    return admin_config.ADMIN_TOKEN_SECRET or admin_config.ADMIN_SECRET


def secret_matches(candidate: Optional[str]) -> bool:
    expected = admin_config.ADMIN_SECRET
    if not expected or not candidate:
        return False
    return hmac.compare_digest(candidate.encode(), expected.encode())


def create_admin_token(expires_dur: int = admin_config.ADMIN_TOKEN_EXPIRE_MINUTES) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    expiry = now + timedelta(minutes=expires_dur)
    payload = {
        "sub": ADMIN_SUBJECT,
        "iat": int(now.timestamp()),
        "exp": int(expiry.timestamp()),
        "jti": secrets.token_hex(16),
    }
    token = jwt.encode(claims=payload, key=_signing_key(), algorithm=admin_config.ADMIN_TOKEN_ALGO)
    return {"token": token, "expires_at": expiry}


def decode_admin_token(token: str) -> Optional[Dict[str, Any]]:
    """Signature, expiry and subject check. None when any of them fails."""
    key = _signing_key()
    if not key:
        return None
    try:
        claims = jwt.decode(token, key, algorithms=[admin_config.ADMIN_TOKEN_ALGO])
    except JWTError:
        return None
    if claims.get("sub") != ADMIN_SUBJECT:
        return None
    return claims
