from decimal import ROUND_FLOOR, Decimal
from typing import Any, Dict, Optional
from metapay.common.utils import from_cents
from metapay.processor.models import InvoiceDetails


def cart_quantity(total_usd: Decimal) -> int:
    """Units of the $0.01 placeholder product that add up to `total_usd`, rounded down."""
    return int((total_usd * 100).to_integral_value(rounding=ROUND_FLOOR))


def transaction_view(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "seller_id": row["seller_id"],
        "invoice_id": row["invoice_id"],
        "amount": from_cents(row["amount"]),
        "customer_fee": from_cents(row["customer_fee"]),
        "net_to_seller": from_cents(row["net_to_seller"]),
        "status": row["status"],
        "description": row["description"],
        "completed_at": row["completed_at"],
        "created_at": row["created_at"],
    }


def invoice_view(row: Dict[str, Any], details: Optional[InvoiceDetails]) -> Dict[str, Any]:
    return {
        "id": row["invoice_id"],
        "amount": from_cents(row["amount"]),
        "customerFee": from_cents(row["customer_fee"]),
        "netToSeller": from_cents(row["net_to_seller"]),
        "status": row["status"],
        "description": row["description"],
        "completedAt": row["completed_at"],
        "createdAt": row["created_at"],
        "sellauth": {
            "paid_usd": details.paid_usd,
            "email": details.email,
            "gateway": details.gateway,
        } if details else None,
    }


def admin_transaction_view(row: Dict[str, Any]) -> Dict[str, Any]:
    out = transaction_view(row)
    out["seller"] = {
        "id": row["seller_id"],
        "email": row["seller_email"],
        "business_name": row["seller_business_name"],
    }
    return out
