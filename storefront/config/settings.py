from decimal import Decimal
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    DATABASE_URL: str
    ENV: str = "dev"                  # "dev" / "staging" / "prod"
    SERVICE_NAME: str = "baxeinwear"
    SQL_ECHO: bool = False
    EXPOSE_ERROR_DETAILS: bool = False   # only for local debugging , never in prod
    PASS_HASH_SCHEME: str = "pbkdf2_sha256"
    MIN_PASSWORD_LENGTH: int = 6
    DEFAULT_SHIPPING_FEE: Decimal = Decimal("15.00")
    PAYMENT_AMOUNT_TOLERANCE: Decimal = Decimal("0.01")
    TOP_VARIANTS_LIMIT: int = 5

    class Config:
        env_file = ".env"
        extra = "ignore"

config_settings = Settings()
