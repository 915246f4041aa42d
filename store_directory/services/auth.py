"""Authentication service: accounts, passwords, tokens, password reset.

Passwords:
- Hashed with werkzeug.security (salted PBKDF2/scrypt, self-describing format)

Tokens:
- HS256 JWT, `sub` = user id, `exp` = now + access_token_expire_minutes

Password reset:
- 20 random bytes (hex) stored on the user with a 1 hour expiry
- The forgot-password response never reveals whether the email exists
"""

from datetime import datetime, timedelta, timezone
import logging
import secrets

from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from store_directory.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidResetTokenError,
    NotFoundError,
)
from store_directory.models import User
from store_directory.schemas import AccountUpdate, RegisterRequest, UserResponse
from store_directory.services.hearts import load_heart_ids
from store_directory.settings import get_settings
from store_directory.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def to_user_response(user: User, hearts: list[int]) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        gravatar=user.gravatar,
        email=user.email,
        hearts=hearts,
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# ============================================================
# Tokens
# ============================================================


def create_access_token(user_id: int, *, expires_delta: timedelta | None = None) -> str:
    """Issue a signed bearer token for `user_id`."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    """Validate a bearer token and return the user id it carries.

    Raises:
        AuthenticationError: Expired, tampered or malformed token.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise AuthenticationError("Invalid token")

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token: missing user ID")


# ============================================================
# Accounts
# ============================================================


async def _get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user(user_id: int) -> User | None:
    async with get_session() as session:
        result = await session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()


async def register_user(payload: RegisterRequest) -> User:
    """Create an account; email must be unused."""
    async with get_session() as session:
        if await _get_user_by_email(session, payload.email) is not None:
            raise ConflictError(
                "That email is already registered",
                detail={"email": normalize_email(payload.email)},
            )
        user = User(
            email=normalize_email(payload.email),
            name=payload.name,
            password_hash=generate_password_hash(payload.password),
        )
        session.add(user)
        await session.flush()

    logger.info(f"User registered: id={user.id}")
    return user


async def authenticate(email: str, password: str) -> User:
    """Check credentials.

    Raises:
        AuthenticationError: Unknown email or wrong password (same message for both).
    """
    async with get_session() as session:
        user = await _get_user_by_email(session, email)

    if user is None or not check_password_hash(user.password_hash, password):
        logger.warning("Failed login")
        raise AuthenticationError("Failed Login!")
    return user


async def get_account(user: User) -> UserResponse:
    """The user's own account, with heart ids."""
    async with get_session() as session:
        return to_user_response(user, await load_heart_ids(session, user.id))


async def update_account(user_id: int, payload: AccountUpdate) -> UserResponse:
    changes = payload.model_dump(exclude_unset=True)

    async with get_session() as session:
        result = await session.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(f"User {user_id} not found")

        if changes.get("email") is not None:
            email = normalize_email(changes["email"])
            if email != user.email:
                other = await _get_user_by_email(session, email)
                if other is not None:
                    raise ConflictError("That email is already registered", detail={"email": email})
                user.email = email
        if changes.get("name") is not None:
            user.name = changes["name"]

        await session.flush()
        return to_user_response(user, await load_heart_ids(session, user.id))


# ============================================================
# Password reset
# ============================================================


async def request_password_reset(email: str) -> str | None:
    """Issue a reset token for `email`.

    Returns:
        The token, or None when no account uses that email.
    """
    settings = get_settings()
    async with get_session() as session:
        user = await _get_user_by_email(session, email)
        if user is None:
            return None
        user.reset_password_token = secrets.token_hex(20)
        user.reset_password_expires = datetime.now(timezone.utc) + timedelta(
            seconds=settings.password_reset_ttl_seconds
        )
        token = user.reset_password_token

    logger.info(f"Password reset issued: user={user.id}")
    return token


async def _get_user_by_reset_token(session: AsyncSession, token: str) -> User:
    result = await session.execute(select(User).where(User.reset_password_token == token))
    user = result.scalar_one_or_none()
    if (
        user is None
        or user.reset_password_expires is None
        or _as_utc(user.reset_password_expires) <= datetime.now(timezone.utc)
    ):
        raise InvalidResetTokenError()
    return user


async def check_reset_token(token: str) -> None:
    """Raise InvalidResetTokenError unless `token` is current."""
    async with get_session() as session:
        await _get_user_by_reset_token(session, token)


async def reset_password(token: str, new_password: str) -> User:
    """Set a new password with a reset token; the token is consumed."""
    async with get_session() as session:
        user = await _get_user_by_reset_token(session, token)
        user.password_hash = generate_password_hash(new_password)
        user.reset_password_token = None
        user.reset_password_expires = None
        await session.flush()

    logger.info(f"Password reset completed: user={user.id}")
    return user
