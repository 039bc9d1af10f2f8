from metapay.common.logging_setup import get_logger

logger = get_logger("metapay.payouts")

MIN_PAYOUT_CENTS = 1000
ADMIN_NOTE_MAX_LEN = 500
DEFAULT_PAYOUTS_PER_PAGE = 10
