from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from metapay.payouts.constants import ADMIN_NOTE_MAX_LEN
from metapay.schema.full_schema import PayoutCrypto


class PayoutRequestIn(BaseModel):
    crypto: str
    amount: Optional[Decimal] = None

    @field_validator("crypto")
    @classmethod
    def check_crypto(cls, v: str) -> str:
        if v not in {c.value for c in PayoutCrypto}:
            raise ValueError("Invalid crypto type")
        return v

    @field_validator("amount")
    @classmethod
    def check_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Amount must be positive")
        return v


class PayoutDecisionIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payout_id: int = Field(alias="payoutId", gt=0)
    status: Literal["approved", "rejected"]
    admin_note: Optional[str] = Field(default=None, alias="adminNote", max_length=ADMIN_NOTE_MAX_LEN)
