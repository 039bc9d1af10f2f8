from metapay.common.logging_setup import get_logger

logger = get_logger("metapay.processor")

DEFAULT_FAILURE_MESSAGE = "SellAuth failure"

COUPON_MAX_ATTEMPTS = 3

# price of the placeholder product the cart is built from, in USD cents
DUMMY_UNIT_PRICE_CENTS = 1
