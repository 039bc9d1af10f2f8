from metapay.common.logging_setup import get_logger

logger = get_logger("metapay.admin")

ADMIN_SUBJECT = "admin"
ADMIN_SECRET_HEADER = "X-Admin-Secret"
UNAUTHORIZED_DETAIL = "Unauthorized admin access"
