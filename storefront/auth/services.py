from fastapi import HTTPException,status
from sqlalchemy.exc import IntegrityError
from storefront.auth.constants import (ACCOUNT_TYPE_CUSTOMER, DEFAULT_COMPANY_NAME, DEFAULT_CUSTOMER_ADDRESS,
                                       INVALID_CREDENTIALS, logger)
from storefront.auth.models import SignIn, SignupIn
from storefront.auth.utils import hash_password, verify_password
from storefront.schema.full_schema import Customer, Merchant, UserRole, Users
from storefront.user.repository import Account, account_for_user, user_by_email


def _text_or_default(value, default):
    if value is None or not str(value).strip():
        return default
    return str(value).strip()


async def create_user(session,payload: SignupIn) -> Account:

    existing = await user_by_email(session,payload.email)
    if existing:
        logger.warning("user.duplicate", extra={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    is_customer = payload.account_type == ACCOUNT_TYPE_CUSTOMER
    role = UserRole.CUSTOMER if is_customer else UserRole.MERCHANT

    try:
        user = Users(name=payload.full_name, email=payload.email,
                     password_hash=hash_password(payload.password), role=role.value)
        session.add(user)
        await session.flush()

        # exactly one profile per user , picked by role
        if is_customer:
            session.add(Customer(user_id=user.id, address=_text_or_default(payload.endereco, DEFAULT_CUSTOMER_ADDRESS)))
        else:
            session.add(Merchant(user_id=user.id, company_name=_text_or_default(payload.empresa, DEFAULT_COMPANY_NAME)))
        await session.flush()

        account = await account_for_user(session,user)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.warning("user.create.integrity_error", extra={"email": payload.email})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    logger.info("user.created", extra={"usuario_id": user.id, "role": role.value})
    return account


async def authenticate_user(session,payload: SignIn) -> Account:
    user = await user_by_email(session,payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.warning("login.failed", extra={"email": payload.email, "reason": "invalid_credentials"})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    account = await account_for_user(session,user)
    if account is None:
        logger.error("login.profile_missing", extra={"usuario_id": user.id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")
    return account
