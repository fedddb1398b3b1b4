from passlib.context import CryptContext
from storefront.config.settings import config_settings

PASS_HASH_SCHEME=config_settings.PASS_HASH_SCHEME
MIN_PASSWORD_LENGTH=config_settings.MIN_PASSWORD_LENGTH

pwd_context = CryptContext(schemes=[PASS_HASH_SCHEME], deprecated="auto")

def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)

def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def validate_password(password: str, min_length: int = MIN_PASSWORD_LENGTH) -> tuple[bool, str]:
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters long"
    return True, "OK"
