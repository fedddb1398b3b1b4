from storefront.common.logging_setup import get_logger

logger = get_logger("storefront.auth")

ACCOUNT_TYPE_CUSTOMER = "cliente"
ACCOUNT_TYPE_MERCHANT = "lojista"

DEFAULT_CUSTOMER_ADDRESS = "Endereço não informado"
DEFAULT_COMPANY_NAME = "Empresa não informada"

INVALID_CREDENTIALS = "Invalid email or password"
