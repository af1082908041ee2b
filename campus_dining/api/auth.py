"""Authentication API endpoints"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.config import settings
from campus_dining.database import get_db
from campus_dining.models.user import User
from campus_dining.schemas.auth import Token, LoginRequest, RefreshRequest, RegisterRequest, UserResponse
from campus_dining.schemas.base import MessageResponse
from campus_dining.security import (
    ACCESS,
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)
from campus_dining.services import users as user_service
from campus_dining.services.permissions import Action, is_allowed

router = APIRouter()

# OAuth2 scheme; auto_error is off so guest routes can share it
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _user_from_token(token: str, db: AsyncSession) -> User:
    user_id = decode_token(token, ACCESS)
    if user_id is None:
        raise _credentials_exception()

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise _credentials_exception()

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise _credentials_exception()

    return user


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from token"""
    if not token:
        raise _credentials_exception("Not authorized, no token")
    return await _user_from_token(token, db)


async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Current user when a token is sent, None for guests; a bad token is still rejected"""
    if not token:
        return None
    return await _user_from_token(token, db)


def require_capability(action: Action):
    """Dependency factory for role-based access control"""
    async def capability_checker(current_user: User = Depends(get_current_user)) -> User:
        if not is_allowed(current_user.role, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {current_user.role.value} is not authorized to access this route",
            )
        return current_user
    return capability_checker


async def _issue_tokens(user: User, db: AsyncSession) -> Token:
    """Generate an access/refresh pair and store the refresh token (rotation)"""
    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user)

    user.refresh_token = refresh_token
    await db.commit()
    await db.refresh(user)

    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserResponse.model_validate(user),
    )


async def _authenticate(db: AsyncSession, identifier: str, password: str) -> User:
    result = await db.execute(
        select(User).where(or_(User.username == identifier, User.email == identifier))
    )
    user = result.scalars().first()

    if not user or not verify_password(password, user.hashed_password):
        raise _credentials_exception("Invalid credentials")

    if not user.is_active:
        raise _credentials_exception("User account is disabled")

    user.last_login = datetime.utcnow()
    return user


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a new student account"""
    user = await user_service.register_student(
        db,
        username=data.username,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
    )
    return await _issue_tokens(user, db)


@router.post("/login", response_model=Token)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate with username or email and return tokens"""
    user = await _authenticate(db, data.username or data.email, data.password)
    return await _issue_tokens(user, db)


@router.post("/token", response_model=Token)
async def login_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """OAuth2 password flow, used by the interactive docs"""
    user = await _authenticate(db, form_data.username, form_data.password)
    return await _issue_tokens(user, db)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    request: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    """Refresh access token using refresh token"""
    user_id = decode_token(request.refresh_token, REFRESH)
    if user_id is None:
        raise _credentials_exception("Invalid refresh token")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise _credentials_exception("Invalid refresh token")

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if not user or not user.is_active or user.refresh_token != request.refresh_token:
        raise _credentials_exception("Invalid refresh token")

    return await _issue_tokens(user, db)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """Get current user information"""
    return current_user


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Logout user by invalidating refresh token"""
    current_user.refresh_token = None
    await db.commit()
    return MessageResponse(message="Successfully logged out")
