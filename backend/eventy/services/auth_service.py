"""
Authentication service handling user registration, login and token
resolution.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventy.models.user import User, ROLE_USER
from eventy.schemas.user import UserCreate, UserLogin
from eventy.core.exceptions import AuthenticationError, ConflictError
from eventy.core.security import hash_password, verify_password, create_access_token, decode_access_token
from eventy.core.logging import get_logger

logger = get_logger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "role": user.role})


async def register_user(db: AsyncSession, user_data: UserCreate, role: str = ROLE_USER) -> User:
    """
    Register a new user with hashed password.
    Raises ConflictError if the email is already registered.
    """
    if await get_user_by_email(db, user_data.email):
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise ConflictError("User already exists")

    user = User(
        name=user_data.name,
        email=user_data.email.lower(),
        hashed_password=hash_password(user_data.password),
        role=role,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise ConflictError("User already exists") from exc
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, email=user.email, role=user.role)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> User:
    """
    Check credentials and return the user.
    Raises AuthenticationError if they are invalid.
    """
    user = await get_user_by_email(db, login_data.email)

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise AuthenticationError("Invalid email or password")

    logger.info("user_logged_in", user_id=user.id)
    return user


async def resolve_current_user(db: AsyncSession, token: str) -> User:
    payload = decode_access_token(token)

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise AuthenticationError("Not authorized, token failed") from exc

    user = await db.get(User, user_id)
    if user is None:
        logger.warning("token_user_missing", user_id=user_id)
        raise AuthenticationError("Not authorized, user not found")
    return user
