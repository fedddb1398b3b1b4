from email_validator import validate_email, EmailNotValidError
from fastapi import HTTPException,status
from storefront.auth.constants import ACCOUNT_TYPE_CUSTOMER, ACCOUNT_TYPE_MERCHANT, logger
from storefront.auth.models import SignIn, SignupIn
from storefront.auth.utils import validate_password


def normalize_email_address(email: str) -> str:
    """
    Validate and return normalized email (lowercased, normalized by email-validator).
    Raises ValueError if invalid.
    """
    try:
        v = validate_email(email.strip(), check_deliverability=False)
        return v.normalized.lower()
    except EmailNotValidError as e:
        raise ValueError(str(e))


def _bad_request(detail: str):
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def signup_validation(payload: SignupIn) -> SignupIn:
    required = {
        "fullName": payload.full_name,
        "email": payload.email,
        "password": payload.password,
        "confirmPassword": payload.confirm_password,
        "accountType": payload.account_type,
    }
    missing = [k for k, v in required.items() if v is None or not str(v).strip()]
    if missing:
        logger.warning("signup.validation.missing_fields", extra={"fields": missing})
        _bad_request(f"Missing required fields: {', '.join(missing)}")

    if payload.account_type not in (ACCOUNT_TYPE_CUSTOMER, ACCOUNT_TYPE_MERCHANT):
        logger.warning("signup.validation.account_type_invalid", extra={"account_type": payload.account_type})
        _bad_request("Invalid account type , expected 'cliente' or 'lojista'")

    if payload.password != payload.confirm_password:
        logger.warning("signup.validation.password_mismatch")
        _bad_request("Passwords do not match")

    is_valid, detail = validate_password(payload.password)
    if not is_valid:
        logger.warning("signup.validation.password_invalid", extra={"reason": detail})
        _bad_request(detail)

    try:
        email = normalize_email_address(payload.email)
    except ValueError as e:
        logger.warning("signup.validation.email_invalid", extra={"email": payload.email, "error": str(e)})
        _bad_request(f"Invalid email: {e}")

    return payload.model_copy(update={"email": email, "full_name": payload.full_name.strip()})


async def login_validation(payload: SignIn) -> SignIn:
    if not payload.email or not payload.password:
        logger.warning("login.validation.missing_fields")
        _bad_request("Email and password are required")

    try:
        email = normalize_email_address(payload.email)
    except ValueError as e:
        logger.warning("login.validation.email_invalid", extra={"email": payload.email, "error": str(e)})
        _bad_request(f"Invalid email: {e}")

    return payload.model_copy(update={"email": email})
