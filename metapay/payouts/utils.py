from typing import Any, Dict
from metapay.common.utils import from_cents


def payout_view(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "seller_id": row["seller_id"],
        "amount_usd": from_cents(row["amount_usd"]),
        "seller_fee": from_cents(row["seller_fee"]),
        "net_usd": from_cents(row["net_usd"]),
        "crypto": row["crypto"],
        "wallet_address": row["wallet_address"],
        "status": row["status"],
        "admin_note": row["admin_note"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def admin_payout_view(row: Dict[str, Any]) -> Dict[str, Any]:
    out = payout_view(row)
    out["seller"] = {
        "id": row["seller_id"],
        "email": row["seller_email"],
        "business_name": row["seller_business_name"],
    }
    return out
