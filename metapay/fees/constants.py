import enum
from metapay.common.logging_setup import get_logger

logger = get_logger("metapay.fees")

DEFAULT_CUSTOMER_FEE = 15
DEFAULT_SELLER_FEE = 10
MAX_FEE_PERCENT = 30

CONFIG_ROW_ID = 1


class FeeRole(str, enum.Enum):
    CUSTOMER = "customer"
    SELLER = "seller"
