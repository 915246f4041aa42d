"""Authentication endpoints.

POST /v1/auth/register       - create account, returns bearer token
POST /v1/auth/login          - exchange credentials for a bearer token
POST /v1/auth/forgot         - issue a password reset token
GET  /v1/auth/reset/{token}  - check a reset token
POST /v1/auth/reset/{token}  - set a new password
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Path, Request, status

from store_directory.schemas import (
    ErrorResponse,
    ForgotRequest,
    ForgotResponse,
    LoginRequest,
    RegisterRequest,
    ResetRequest,
    TokenResponse,
)
from store_directory.services.auth import (
    authenticate,
    check_reset_token,
    create_access_token,
    register_user,
    request_password_reset,
    reset_password,
)
from store_directory.settings import get_settings

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

FORGOT_MESSAGE = "If that account exists, a password reset has been mailed to it."

ResetToken = Annotated[str, Path(min_length=1, max_length=64, pattern=r"^[a-f0-9]+$")]


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def register(payload: RegisterRequest) -> TokenResponse:
    """Register and log in."""
    user = await register_user(payload)
    return TokenResponse(access_token=create_access_token(user.id))


@router.post("/login", response_model=TokenResponse, responses={401: {"model": ErrorResponse}})
async def login(payload: LoginRequest) -> TokenResponse:
    user = await authenticate(payload.email, payload.password)
    return TokenResponse(access_token=create_access_token(user.id))


@router.post("/forgot", response_model=ForgotResponse)
async def forgot(payload: ForgotRequest, request: Request) -> ForgotResponse:
    """Start a password reset.

    The response is the same whether or not the email is registered. No
    mailer is wired up: the reset link is logged, and returned only when
    EXPOSE_RESET_LINKS is on.
    """
    token = await request_password_reset(payload.email)
    if token is None:
        return ForgotResponse(message=FORGOT_MESSAGE)

    reset_url = str(request.url_for("check_reset", token=token))
    logger.info(f"Password reset link: {reset_url}")
    if get_settings().expose_reset_links:
        return ForgotResponse(message=FORGOT_MESSAGE, reset_url=reset_url)
    return ForgotResponse(message=FORGOT_MESSAGE)


@router.get("/reset/{token}", name="check_reset", responses={400: {"model": ErrorResponse}})
async def check_reset(token: ResetToken) -> dict[str, bool]:
    await check_reset_token(token)
    return {"valid": True}


@router.post("/reset/{token}", response_model=TokenResponse, responses={400: {"model": ErrorResponse}})
async def reset(token: ResetToken, payload: ResetRequest) -> TokenResponse:
    """Set a new password and log in."""
    user = await reset_password(token, payload.password)
    return TokenResponse(access_token=create_access_token(user.id))
