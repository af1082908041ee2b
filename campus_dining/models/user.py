"""User model for students, staff and managers"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
import enum

from campus_dining.database import Base, enum_values


class UserRole(str, enum.Enum):
    """User roles for RBAC"""
    STUDENT = "student"
    STAFF = "staff"
    MANAGER = "manager"


STAFF_ROLES = (UserRole.STAFF, UserRole.MANAGER)


class User(Base):
    """Accounts for every role"""
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Authentication
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    first_name = Column(String(100))
    last_name = Column(String(100))

    # Role
    role = Column(
        Enum(UserRole, name="user_role", values_callable=enum_values),
        nullable=False,
        default=UserRole.STUDENT,
    )

    # Status
    is_active = Column(Boolean, default=True)

    # Tokens
    refresh_token = Column(String(500))

    # Timestamps
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
