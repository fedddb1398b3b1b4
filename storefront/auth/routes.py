from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import  AsyncSession
from storefront.auth.dependencies import login_validation, signup_validation
from storefront.auth.models import SignIn, SignupIn
from storefront.auth.services import authenticate_user, create_user
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.user.repository import account_summary
from storefront.auth.constants import logger

auth_router = APIRouter()


@auth_router.post("/login")
async def login_user(payload: SignIn = Depends(login_validation), session: AsyncSession = Depends(get_session)):

    logger.info("login.attempt", extra={"email": payload.email})

    account = await authenticate_user(session,payload)

    logger.info("login.success", extra={"usuario_id": account.user_id})
    return success_response({"message": "Login successful", **account_summary(account)})


@auth_router.post("/cadastro", status_code=status.HTTP_201_CREATED)
async def signup_user(payload: SignupIn = Depends(signup_validation), session: AsyncSession = Depends(get_session)):

    logger.info("signup.attempt", extra={"email": payload.email, "account_type": payload.account_type})

    account = await create_user(session,payload)

    logger.info("signup.success", extra={"usuario_id": account.user_id})
    return success_response({"message": "User created successfully", **account_summary(account)},
                            status_code=status.HTTP_201_CREATED)
