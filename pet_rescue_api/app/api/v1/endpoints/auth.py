"""
Authentication endpoints for API clients.

Successful sign-in and sign-up return a bearer token to be sent as
``Authorization: Bearer <token>`` on the protected routes.
"""

from fastapi import APIRouter, HTTPException, status

from ....core.exceptions import AccountLockedError, DuplicateError
from ....core.security import create_access_token
from ....schemas.auth import (
    ForgotPasswordInput,
    LoginInput,
    RegisterInput,
    ResetPasswordInput,
    TokenResponse,
)
from ....services.user_service import UserService


router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginInput) -> TokenResponse:
    """Exchange email and password for an access token."""
    try:
        user = await UserService.authenticate(credentials.email, credentials.password)
    except AccountLockedError as e:
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e)) from e
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return TokenResponse(access_token=create_access_token({"sub": user.id}))


@router.post("/signup", response_model=TokenResponse)
async def signup(payload: RegisterInput) -> TokenResponse:
    """Create a user account with its client profile and sign it in."""
    try:
        user = await UserService.signup(payload.email, payload.password)
    except DuplicateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return TokenResponse(access_token=create_access_token({"sub": user.id}))


@router.post("/forgot_password")
async def forgot_password(payload: ForgotPasswordInput) -> dict:
    """Start a password reset.

    The response is the same whether or not the email is registered.
    """
    await UserService.forgot_password(payload.email)
    return {"detail": "If the email is registered, a reset link has been sent."}


@router.post("/reset_password")
async def reset_password(payload: ResetPasswordInput) -> dict:
    if not await UserService.reset_password(payload.email, payload.reset_code, payload.password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid reset code")
    return {"detail": "Password has been reset."}
