from typing import Any, Dict, Optional
from fastapi import Request
from metapay.common.utils import to_cents


def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop, else X-Real-IP."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.headers.get("x-real-ip")


def extract_invoice(body: Dict[str, Any]) -> Dict[str, Any]:
    invoice = body.get("invoice") or body.get("payment")
    return invoice if isinstance(invoice, dict) else {}


def invoice_id_of(invoice: Dict[str, Any]) -> Optional[str]:
    return as_text(invoice.get("id"))


def synced_amount_cents(invoice: Dict[str, Any]) -> int:
    return to_cents(invoice.get("paid_usd") or invoice.get("total") or 0)


def as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)
