from decimal import Decimal
from metapay.common.logging_setup import get_logger
from metapay.schema.full_schema import TransactionStatus

logger = get_logger("metapay.transactions")

MIN_PAYMENT_USD = Decimal("0.50")
MAX_PAYMENT_USD = Decimal("100000")
SUPPORTED_CURRENCY = "usd"

# processor refuses checkouts under 50 units of the $0.01 product
MIN_CART_QUANTITY = 50

DEFAULT_INVOICES_PER_PAGE = 10
DEFAULT_ADMIN_PER_PAGE = 20
MAX_PER_PAGE = 100

AUTO_SYNC_DESCRIPTION = "Auto-synced from webhook"
FALLBACK_USER_AGENT = "Mozilla/5.0"

REFUNDABLE_FROM = (TransactionStatus.COMPLETED,)
