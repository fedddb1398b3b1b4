from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.orders")

CONFIRM_PAYMENT_ACTION = "confirm_payment"
DEFAULT_PAYMENT_TYPE = "PIX"
