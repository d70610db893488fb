"""
Sign-in, sign-out and registration of administrators.

The session is a signed token in an HttpOnly cookie.  Without
``rememberMe`` the cookie lives for the browser session; with it, the
cookie persists for ``settings.session_expire_days``.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...core.config import settings
from ...core.exceptions import AccountLockedError, DuplicateError
from ...core.security import SCOPE_ADMIN, create_access_token, get_session_user
from ...schemas.auth import ForgotPasswordInput, LoginInput, RegisterInput, ResetPasswordInput
from ...schemas.user import UserCreate, UserRead, UserRole
from ...services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def _start_session(response: Response, user: UserRead, remember_me: bool) -> None:
    if remember_me:
        lifetime = settings.session_expire_days * 24 * 60 * 60
    else:
        lifetime = settings.access_token_expire_minutes * 60
    token = create_access_token({"sub": user.id}, expires_delta=lifetime, scope=SCOPE_ADMIN)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=lifetime if remember_me else None,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


@router.post("/login", response_model=UserRead)
async def login(credentials: LoginInput, response: Response) -> UserRead:
    """Sign in and set the session cookie.

    Responds 423 while the account is locked out after repeated failed
    attempts.
    """
    try:
        user = await UserService.authenticate(credentials.email, credentials.password)
    except AccountLockedError as e:
        logger.warning("Locked out admin sign-in attempt for %s", credentials.email)
        raise HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(e)) from e
    if user is None:
        logger.error("Invalid admin sign-in attempt for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect Email or Password"
        )
    _start_session(response, user, credentials.remember_me)
    return user


@router.post("/logout")
async def logout(response: Response) -> dict:
    response.delete_cookie(settings.session_cookie_name)
    return {"detail": "Signed out"}


@router.get("/me", response_model=UserRead)
async def whoami(current_user: Dict[str, Any] = Depends(get_session_user)) -> UserRead:
    return await UserService.get_user(current_user["user_id"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterInput, response: Response) -> UserRead:
    """Create an administrator account and sign it in."""
    if not settings.allow_admin_registration:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Registration is disabled"
        )
    try:
        user = await UserService.create_user(
            UserCreate(email=payload.email, password=payload.password, role=UserRole.ADMIN)
        )
    except DuplicateError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    _start_session(response, user, remember_me=False)
    return user


@router.post("/forgot_password")
async def forgot_password(payload: ForgotPasswordInput) -> dict:
    await UserService.forgot_password(payload.email)
    return {"detail": "If the email is registered, a reset link has been sent."}


@router.post("/reset_password")
async def reset_password(payload: ResetPasswordInput) -> dict:
    if not await UserService.reset_password(payload.email, payload.reset_code, payload.password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid reset code")
    return {"detail": "Password has been reset."}
