from typing import Optional, Union
from pydantic import BaseModel, ConfigDict


class CheckoutResult(BaseModel):
    invoice_id: str
    checkout_url: str


class InvoiceDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[str, int]] = None
    paid_usd: Optional[float] = None
    email: Optional[str] = None
    gateway: Optional[str] = None
    status: Optional[str] = None


class CouponResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str


class RefundResult(BaseModel):
    invoice_id: str
    accepted: bool = True
