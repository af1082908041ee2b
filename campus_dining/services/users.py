"""Account creation, update and deletion rules"""

from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.config import settings
from campus_dining.errors import AlreadyExists, NotFound, PolicyViolation, ValidationFailed
from campus_dining.models.order import Order
from campus_dining.models.user import User, UserRole, STAFF_ROLES
from campus_dining.security import get_password_hash
from campus_dining.services.permissions import Action, ensure_allowed

logger = structlog.get_logger()


def staff_email(username: str) -> str:
    return f"{username}@{settings.staff_email_domain}"


async def _ensure_unique(db: AsyncSession, username: str, email: str, exclude_id: Optional[UUID] = None) -> None:
    query = select(User).where(or_(User.username == username, User.email == email))
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    existing = (await db.execute(query)).scalars().first()
    if existing is None:
        return
    if existing.username == username:
        raise AlreadyExists("Username already in use")
    raise AlreadyExists("Email already in use")


async def _commit_unique(db: AsyncSession) -> None:
    """Commit, translating a lost uniqueness race into a 400"""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AlreadyExists("Username or email already in use")


async def get_user(db: AsyncSession, user_id: UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


async def register_student(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> User:
    """Self-service student sign-up"""
    await _ensure_unique(db, username, email)

    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        role=UserRole.STUDENT,
        is_active=True,
    )
    db.add(user)
    await _commit_unique(db)
    await db.refresh(user)

    logger.info("Student registered", user_id=str(user.id), username=user.username)
    return user


async def list_staff(db: AsyncSession, actor: User) -> List[User]:
    ensure_allowed(actor, Action.MANAGE_USERS)
    result = await db.execute(
        select(User).where(User.role.in_(STAFF_ROLES)).order_by(User.created_at.desc())
    )
    return list(result.scalars().all())


def _check_staff_role(role: UserRole) -> None:
    if role not in STAFF_ROLES:
        raise ValidationFailed("Role must be staff or manager")


async def create_staff_user(db: AsyncSession, actor: User, username: str, password: str, role: UserRole) -> User:
    """Manager creates a staff or manager account"""
    ensure_allowed(actor, Action.MANAGE_USERS)
    _check_staff_role(role)

    email = staff_email(username)
    await _ensure_unique(db, username, email)

    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        role=role,
        is_active=True,
    )
    db.add(user)
    await _commit_unique(db)
    await db.refresh(user)

    logger.info("User created", user_id=str(user.id), role=role.value, created_by=str(actor.id))
    return user


async def update_staff_user(
    db: AsyncSession,
    actor: User,
    user: User,
    username: Optional[str] = None,
    password: Optional[str] = None,
    role: Optional[UserRole] = None,
) -> User:
    """Change username (email follows), password or role"""
    ensure_allowed(actor, Action.MANAGE_USERS)

    if role is not None:
        _check_staff_role(role)

    if username:
        email = staff_email(username)
        await _ensure_unique(db, username, email, exclude_id=user.id)
        user.username = username
        user.email = email

    if password:
        user.hashed_password = get_password_hash(password)
        user.refresh_token = None

    if role is not None:
        user.role = role

    await _commit_unique(db)
    await db.refresh(user)

    logger.info("User updated", user_id=str(user.id), updated_by=str(actor.id))
    return user


async def count_orders(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(select(func.count(Order.id)).where(Order.user_id == user_id))
    return int(result.scalar() or 0)


async def delete_user(db: AsyncSession, actor: User, user: User) -> None:
    """
    Delete an account.

    Students with live orders are kept. Staff and managers are always
    removable; orders they own keep a reference that no longer resolves.
    """
    ensure_allowed(actor, Action.MANAGE_USERS)

    if user.role == UserRole.STUDENT:
        order_count = await count_orders(db, user.id)
        if order_count > 0:
            raise PolicyViolation(
                f"Cannot delete student with {order_count} existing order(s). Orders must be handled first."
            )

    await db.delete(user)
    await db.commit()

    logger.info("User deleted", user_id=str(user.id), role=user.role.value, deleted_by=str(actor.id))
