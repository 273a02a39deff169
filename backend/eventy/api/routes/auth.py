"""
Authentication endpoints: register, login and the current user.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventy.db.session import get_db
from eventy.models.user import User
from eventy.schemas.user import UserCreate, UserLogin, UserResponse, AuthResponse
from eventy.services.auth_service import register_user, authenticate_user, issue_token
from eventy.core.security import get_current_user

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(token=issue_token(user), user=UserResponse.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new account and sign it in."""
    user = await register_user(db, user_data)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    user = await authenticate_user(db, login_data)
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return user
