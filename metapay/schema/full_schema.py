import enum
from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy import JSON, BigInteger, CheckConstraint, DateTime, Float, ForeignKey, Integer, Text
from sqlmodel import Column, SQLModel, Field, String
from metapay.common.utils import now


class SellerStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    SUSPENDED = "suspended"

class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

class PayoutStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class PayoutCrypto(str, enum.Enum):
    USDC_SOL = "USDC_SOL"
    USDC_BSC = "USDC_BSC"
    LTC = "LTC"

class WebhookEventStatus(str, enum.Enum):
    RECEIVED = "received"
    PROCESSED = "processed"
    IGNORED = "ignored"
    INCONSISTENT = "inconsistent"
    ERRORED = "errored"


class Seller(SQLModel, table=True):
    __tablename__ = "sellers"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(sa_column=Column(String(320), nullable=False, unique=True, index=True))
    business_name: str = Field(sa_column=Column(String(255), nullable=False))
    url: Optional[str] = Field(default=None, sa_column=Column(String(2048), nullable=True))
    volume_estimate: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))
    status: str = Field(default=SellerStatus.PENDING.value,
        sa_column=Column(String(16), nullable=False, index=True, default=SellerStatus.PENDING.value))
    balance: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0), description="USD cents")
    api_key: str = Field(sa_column=Column(String(128), nullable=False, unique=True, index=True))
    coupon_code: str = Field(sa_column=Column(String(64), nullable=False, unique=True, index=True))

    # per seller fee overrides in percent, null means "use global config"
    custom_customer_fee: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))
    custom_seller_fee: Optional[float] = Field(default=None, sa_column=Column(Float, nullable=True))

    usdc_sol_wallet: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    usdc_bsc_wallet: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    ltc_wallet: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))

    __table_args__ = (CheckConstraint("balance >= 0", name="ck_sellers_balance_non_negative"),)


class FeeConfig(SQLModel, table=True):
    """Singleton row (id=1) with the global fee percentages."""
    __tablename__ = "config"

    id: Optional[int] = Field(default=None, primary_key=True)
    customer_fee: float = Field(sa_column=Column(Float, nullable=False))
    seller_fee: float = Field(sa_column=Column(Float, nullable=False))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    seller_id: int = Field(sa_column=Column(Integer, ForeignKey("sellers.id", ondelete="CASCADE"), index=True, nullable=False))
    invoice_id: str = Field(sa_column=Column(String(128), nullable=False, unique=True, index=True))
    amount: int = Field(default=0, sa_column=Column(BigInteger, nullable=False), description="USD cents")
    customer_fee: int = Field(default=0, sa_column=Column(BigInteger, nullable=False), description="surcharge in USD cents")
    # fixed at creation, this is what gets credited on completion
    net_to_seller: int = Field(default=0, sa_column=Column(BigInteger, nullable=False), description="USD cents")
    status: str = Field(default=TransactionStatus.PENDING.value,
        sa_column=Column(String(16), nullable=False, index=True, default=TransactionStatus.PENDING.value))
    description: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    completed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, index=True))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


class Payout(SQLModel, table=True):
    __tablename__ = "payouts"

    id: Optional[int] = Field(default=None, primary_key=True)
    seller_id: int = Field(sa_column=Column(Integer, ForeignKey("sellers.id", ondelete="CASCADE"), index=True, nullable=False))
    amount_usd: int = Field(sa_column=Column(BigInteger, nullable=False), description="USD cents debited from balance")
    seller_fee: int = Field(sa_column=Column(BigInteger, nullable=False), description="USD cents")
    net_usd: int = Field(sa_column=Column(BigInteger, nullable=False), description="USD cents sent to the wallet")
    crypto: str = Field(sa_column=Column(String(16), nullable=False))
    wallet_address: str = Field(sa_column=Column(String(64), nullable=False))
    status: str = Field(default=PayoutStatus.PENDING.value,
        sa_column=Column(String(16), nullable=False, index=True, default=PayoutStatus.PENDING.value))
    admin_note: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, index=True))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


class WebhookEvent(SQLModel, table=True):
    """Every processor callback lands here, since the ingestor always answers 200 this is the reconciliation trail."""
    __tablename__ = "webhookevent"

    id: Optional[int] = Field(default=None, primary_key=True)
    provider: str = Field(default="sellauth", sa_column=Column(String(64), nullable=False, default="sellauth"))
    event: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    invoice_id: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True, index=True))
    coupon_code: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    payload: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    status: str = Field(default=WebhookEventStatus.RECEIVED.value,
        sa_column=Column(String(16), nullable=False, default=WebhookEventStatus.RECEIVED.value))
    last_error: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    received_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    processed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
