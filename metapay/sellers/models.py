from typing import Literal, Optional, Union
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator
from metapay.sellers.utils import is_valid_bsc_wallet, is_valid_ltc_wallet, is_valid_sol_wallet


def normalize_email_address(email: str) -> str:
    """
    Validate and return normalized email (lowercased, normalized by email-validator).
    Raises ValueError if invalid.
    """
    try:
        v = validate_email(email, check_deliverability=False)
        return v.normalized.lower()
    except EmailNotValidError as e:
        raise ValueError(f"Invalid email format: {e}")


class SellerRegisterIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    business_name: str = Field(alias="businessName")
    url: Optional[Union[HttpUrl, Literal[""]]] = None
    volume_estimate: Optional[float] = Field(default=None, alias="volumeEstimate")

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email_address(v)

    @field_validator("business_name")
    @classmethod
    def check_business_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Business name must be at least 3 characters")
        return v

    @field_validator("volume_estimate")
    @classmethod
    def check_volume(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("Volume estimate must be non-negative")
        return v


class ProfileUpdateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    usdc_sol_wallet: Optional[str] = Field(default=None, alias="usdcSolWallet")
    usdc_bsc_wallet: Optional[str] = Field(default=None, alias="usdcBscWallet")
    ltc_wallet: Optional[str] = Field(default=None, alias="ltcWallet")

    # empty string is allowed and clears the wallet
    @field_validator("usdc_sol_wallet")
    @classmethod
    def check_sol(cls, v: Optional[str]) -> Optional[str]:
        if v and not is_valid_sol_wallet(v):
            raise ValueError("Invalid Solana address")
        return v

    @field_validator("usdc_bsc_wallet")
    @classmethod
    def check_bsc(cls, v: Optional[str]) -> Optional[str]:
        if v and not is_valid_bsc_wallet(v):
            raise ValueError("Invalid BSC address")
        return v

    @field_validator("ltc_wallet")
    @classmethod
    def check_ltc(cls, v: Optional[str]) -> Optional[str]:
        if v and not is_valid_ltc_wallet(v):
            raise ValueError("Invalid LTC address")
        return v


class ApproveSellerIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    seller_id: int = Field(alias="sellerId", gt=0)
