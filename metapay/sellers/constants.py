from metapay.common.logging_setup import get_logger

logger = get_logger("metapay.sellers")

API_KEY_PREFIX = "metapay_sk_"
COUPON_PREFIX = "SELLER"

BASE58 = "1-9A-HJ-NP-Za-km-z"
SOL_WALLET_PATTERN = rf"^[{BASE58}]{{44}}$"
BSC_WALLET_PATTERN = r"^0x[a-fA-F0-9]{40}$"
LTC_WALLET_PATTERN = rf"^[LM3][{BASE58}]{{26,33}}$"
