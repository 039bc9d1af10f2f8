from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from metapay.fees.constants import MAX_FEE_PERCENT


class FeeUpdateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_fee: Optional[float] = Field(default=None, alias="customerFee", ge=0, le=MAX_FEE_PERCENT)
    seller_fee: Optional[float] = Field(default=None, alias="sellerFee", ge=0, le=MAX_FEE_PERCENT)
    seller_id: Optional[int] = Field(default=None, alias="sellerId", gt=0)
