from metapay.common.logging_setup import get_logger

logger = get_logger("metapay.webhooks")

PROVIDER = "sellauth"

COMPLETION_EVENTS = frozenset({"payment.completed", "invoice.completed"})
REFUND_EVENTS = frozenset({"payment.refunded", "invoice.refunded"})
FAILURE_EVENTS = frozenset({"payment.failed", "invoice.failed"})

LAST_ERROR_MAX_LEN = 2000

REFUND_SHORTFALL_NOTE = "Refund shortfall of {cents} cents, reconciliation required"
