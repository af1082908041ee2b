"""Authentication and user schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import EmailStr, Field, model_validator

from campus_dining.models.user import UserRole
from campus_dining.schemas.base import CamelModel


class UserResponse(CamelModel):
    """User response"""
    id: UUID
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class Token(CamelModel):
    """JWT token response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class LoginRequest(CamelModel):
    """Login with username or email"""
    username: Optional[str] = None
    email: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def require_identifier(self):
        if not self.username and not self.email:
            raise ValueError("Please provide a username or email")
        return self


class RefreshRequest(CamelModel):
    """Token refresh request"""
    refresh_token: str


class RegisterRequest(CamelModel):
    """Student sign-up"""
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class StaffUserCreate(CamelModel):
    """Manager creates a staff or manager account"""
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    role: UserRole


class StaffUserUpdate(CamelModel):
    """Update staff or manager account"""
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
