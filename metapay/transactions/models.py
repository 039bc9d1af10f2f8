from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, HttpUrl, field_validator
from metapay.sellers.models import normalize_email_address
from metapay.transactions.constants import MAX_PAYMENT_USD, MIN_PAYMENT_USD


class PaymentCreateIn(BaseModel):
    amount: Decimal
    currency: str
    customer_email: str
    description: Optional[str] = Field(default=None, max_length=500)
    success_url: Optional[HttpUrl] = None
    cancel_url: Optional[HttpUrl] = None

    @field_validator("amount")
    @classmethod
    def check_amount(cls, v: Decimal) -> Decimal:
        if v < MIN_PAYMENT_USD:
            raise ValueError("Minimum $0.50")
        if v > MAX_PAYMENT_USD:
            raise ValueError("Maximum $100,000 per transaction")
        return v

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v: str) -> str:
        if v != "usd":
            raise ValueError("Only USD supported")
        return v

    @field_validator("customer_email")
    @classmethod
    def check_customer_email(cls, v: str) -> str:
        try:
            return normalize_email_address(v)
        except ValueError:
            raise ValueError("Invalid customer email")


class RefundIn(BaseModel):
    reason: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def check_reason(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if len(v) < 5:
            raise ValueError("Reason too short")
        if len(v) > 500:
            raise ValueError("Reason too long")
        return v
