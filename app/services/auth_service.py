"""Account, password and password-reset logic"""
import logging
import secrets
from datetime import datetime, timedelta

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models import PasswordResetToken, User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode("utf-8")[:72]
    return pwd_context.hash(password_bytes.decode("utf-8", errors="ignore"))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    password_bytes = plain_password.encode("utf-8")[:72]
    return pwd_context.verify(password_bytes.decode("utf-8", errors="ignore"), hashed_password)


async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).where(User.user_id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    image_url: str | None = None,
) -> User:
    """
    Create a new account (user_id is assigned by the database).

    Raises:
        ValueError: if the email is already registered
    """
    existing_user = await get_user_by_email(session, email)
    if existing_user:
        raise ValueError("Email is already registered.")

    user = User(
        name=name,
        email=email.lower(),
        password=hash_password(password),
        image_url=image_url,
    )
    session.add(user)
    await session.flush()  # assigns user_id
    return user


async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    """User for valid credentials, otherwise None"""
    user = await get_user_by_email(session, email)
    if not user:
        return None

    if not verify_password(password, user.password):
        return None

    return user


async def update_profile(
    session: AsyncSession,
    user_id: int,
    name: str | None = None,
    image_url: str | None = None,
) -> User | None:
    user = await get_user_by_id(session, user_id)
    if not user:
        return None

    if name is not None:
        user.name = name
    if image_url is not None:
        user.image_url = image_url or None
    await session.flush()
    return user


async def change_password(
    session: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
) -> User | None:
    """
    Replace a user's password after checking the current one.

    Raises:
        ValueError: if the current password is wrong
    """
    user = await get_user_by_id(session, user_id)
    if not user:
        return None

    if not verify_password(current_password, user.password):
        raise ValueError("Current password is incorrect.")

    user.password = hash_password(new_password)
    await session.flush()
    return user


async def create_password_reset_token(session: AsyncSession, email: str) -> PasswordResetToken | None:
    """
    Issue a single-use reset token for the account behind `email`.

    Returns None for unknown emails; the route answers the same way in
    both cases.
    """
    user = await get_user_by_email(session, email)
    if not user:
        return None

    settings = get_settings()
    reset_token = PasswordResetToken(
        token=secrets.token_hex(32),
        user_id=user.user_id,
        expires_at=datetime.utcnow() + timedelta(hours=settings.password_reset_ttl_hours),
        is_used=False,
    )
    session.add(reset_token)
    await session.flush()
    return reset_token


async def reset_password(session: AsyncSession, token: str, new_password: str) -> User:
    """
    Set a new password using a reset token and mark the token used.

    Raises:
        ValueError: if the token is unknown, expired or already used
    """
    result = await session.execute(select(PasswordResetToken).where(PasswordResetToken.token == token))
    reset_token = result.scalar_one_or_none()

    if reset_token is None or reset_token.is_used:
        raise ValueError("Invalid or already used reset token.")
    if reset_token.expires_at < datetime.utcnow():
        raise ValueError("Reset token has expired.")

    user = await get_user_by_id(session, reset_token.user_id)
    if not user:
        raise ValueError("Invalid or already used reset token.")

    user.password = hash_password(new_password)
    reset_token.is_used = True
    await session.flush()
    logger.info("Password reset for user %s", user.user_id)
    return user
