import re
import secrets
from typing import Any, Dict, Optional
from metapay.common.utils import from_cents
from metapay.schema.full_schema import PayoutCrypto
from metapay.sellers.constants import API_KEY_PREFIX, BSC_WALLET_PATTERN, COUPON_PREFIX, LTC_WALLET_PATTERN, SOL_WALLET_PATTERN


def generate_api_key() -> str:
    return f"{API_KEY_PREFIX}{secrets.token_hex(32)}"


def generate_coupon_code(index: int) -> str:
    return f"{COUPON_PREFIX}_{index:06d}_{secrets.token_hex(4).upper()}"


def mask_api_key(api_key: str) -> str:
    return f"****{api_key[-8:]}"


def is_valid_sol_wallet(value: str) -> bool:
    return re.fullmatch(SOL_WALLET_PATTERN, value) is not None


def is_valid_bsc_wallet(value: str) -> bool:
    return re.fullmatch(BSC_WALLET_PATTERN, value) is not None


def is_valid_ltc_wallet(value: str) -> bool:
    return re.fullmatch(LTC_WALLET_PATTERN, value) is not None


WALLET_FIELD_BY_CRYPTO = {
    PayoutCrypto.USDC_SOL: "usdc_sol_wallet",
    PayoutCrypto.USDC_BSC: "usdc_bsc_wallet",
    PayoutCrypto.LTC: "ltc_wallet",
}


def wallet_for(seller: Dict[str, Any], crypto: PayoutCrypto) -> Optional[str]:
    return seller.get(WALLET_FIELD_BY_CRYPTO[crypto]) or None


def seller_admin_view(seller: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": seller["id"],
        "email": seller["email"],
        "business_name": seller["business_name"],
        "url": seller["url"],
        "volume_estimate": seller["volume_estimate"],
        "status": seller["status"],
        "balance": from_cents(seller["balance"]),
        "created_at": seller["created_at"],
        "api_key": seller["api_key"],
    }
