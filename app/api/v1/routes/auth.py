"""Authentication routes (session cookie based)"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_active_user, require_authentication
from app.api.v1.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    MessageResponse,
    ProfileUpdateRequest,
    ResetPasswordRequest,
    SessionInfoResponse,
    SignupRequest,
    SignupResponse,
    UserInfoResponse,
)
from app.core.config import get_settings
from app.db.models import User
from app.db.session import get_session
from app.services import auth_service
from app.utils.session import get_current_user_id, is_authenticated, login_user, logout_user

logger = logging.getLogger(__name__)

router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If an account exists for that email, a reset link has been sent."


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    signup_data: SignupRequest,
    session: AsyncSession = Depends(get_session),
) -> SignupResponse:
    """
    Create an account.

    - user_id is assigned by the database
    - email must be unique (409 otherwise)
    """
    try:
        user = await auth_service.create_user(
            session=session,
            name=signup_data.name,
            email=signup_data.email,
            password=signup_data.password,
            image_url=signup_data.image_url,
        )
        await session.commit()
    except ValueError as e:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        await session.rollback()
        logger.exception("Signup failed")
        raise HTTPException(status_code=500, detail=f"Signup failed: {str(e)}")

    logger.info("User %s signed up", user.user_id)
    return SignupResponse(
        success=True,
        message="Signup complete.",
        user_id=user.user_id,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    login_data: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> LoginResponse:
    """Check email and password and store user_id in the session."""
    user = await auth_service.authenticate_user(
        session=session,
        email=login_data.email,
        password=login_data.password,
    )

    if not user:
        raise HTTPException(status_code=401, detail="Email or password is incorrect.")

    login_user(request, user_id=user.user_id, name=user.name)
    logger.info("User %s logged in", user.user_id)

    return LoginResponse(
        success=True,
        message="Login successful",
        user_id=user.user_id,
        name=user.name,
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(request: Request) -> LogoutResponse:
    if not is_authenticated(request):
        raise HTTPException(status_code=401, detail="Not logged in.")

    logout_user(request)

    return LogoutResponse(
        success=True,
        message="Logout successful",
    )


@router.get("/session", response_model=SessionInfoResponse)
async def get_session_info(request: Request) -> SessionInfoResponse:
    authenticated = is_authenticated(request)
    user_id = get_current_user_id(request) if authenticated else None

    return SessionInfoResponse(
        authenticated=authenticated,
        user_id=user_id,
    )


@router.get("/me", response_model=UserInfoResponse)
async def get_current_user(user: User = Depends(get_current_active_user)) -> UserInfoResponse:
    return UserInfoResponse.model_validate(user)


@router.patch("/me", response_model=UserInfoResponse)
async def update_current_user(
    profile: ProfileUpdateRequest,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> UserInfoResponse:
    """Update name and/or avatar URL."""
    try:
        user = await auth_service.update_profile(
            session,
            user_id,
            name=profile.name,
            image_url=profile.image_url,
        )
        if not user:
            raise HTTPException(status_code=404, detail="User not found.")
        await session.commit()
        await session.refresh(user)
    except HTTPException:
        await session.rollback()
        raise
    except Exception as e:
        await session.rollback()
        logger.exception("Profile update failed for user %s", user_id)
        raise HTTPException(status_code=500, detail=f"Profile update failed: {str(e)}")

    return UserInfoResponse.model_validate(user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    try:
        user = await auth_service.change_password(
            session,
            user_id,
            current_password=payload.current_password,
            new_password=payload.new_password,
        )
        if not user:
            raise HTTPException(status_code=404, detail="User not found.")
        await session.commit()
    except ValueError as e:
        await session.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        await session.rollback()
        raise

    return MessageResponse(success=True, message="Password changed.")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """
    Issue a password reset token.

    The response is the same whether or not the email is registered. The
    reset link is written to the log; delivering it is left to the mail
    infrastructure.
    """
    reset_token = await auth_service.create_password_reset_token(session, payload.email)
    if reset_token is not None:
        await session.commit()
        settings = get_settings()
        logger.info(
            "Password reset link for user %s: %s/auth/reset-password?token=%s",
            reset_token.user_id,
            settings.frontend_url.rstrip("/"),
            reset_token.token,
        )

    return MessageResponse(success=True, message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    try:
        await auth_service.reset_password(session, payload.token, payload.new_password)
        await session.commit()
    except ValueError as e:
        await session.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    return MessageResponse(success=True, message="Password has been reset.")
