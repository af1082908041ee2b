"""Menu management API endpoints"""

import enum
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from campus_dining.database import get_db
from campus_dining.models.menu import MenuItem
from campus_dining.models.user import User
from campus_dining.schemas.base import MessageResponse
from campus_dining.schemas.menu import MenuItemCreate, MenuItemUpdate, MenuItemResponse
from campus_dining.services.permissions import Action, is_allowed
from campus_dining.api.auth import get_optional_user, require_capability

router = APIRouter()
logger = structlog.get_logger()


class MenuScope(str, enum.Enum):
    """Which items a viewer asks for"""
    AVAILABLE = "available"
    ALL = "all"


async def _get_item(db: AsyncSession, item_id: UUID) -> MenuItem:
    result = await db.execute(select(MenuItem).where(MenuItem.id == item_id))
    item = result.scalar_one_or_none()

    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")

    return item


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> None:
    query = select(MenuItem.id).where(MenuItem.name == name)
    if exclude_id is not None:
        query = query.where(MenuItem.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise HTTPException(status_code=400, detail="Menu item name already in use")


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Menu item name already in use")


@router.get("", response_model=List[MenuItemResponse])
async def list_menu_items(
    scope: MenuScope = MenuScope.AVAILABLE,
    category: Optional[str] = None,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """List menu items; scope=all (staff/manager) includes unavailable items"""
    if scope == MenuScope.ALL:
        if current_user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no token")
        if not is_allowed(current_user.role, Action.VIEW_FULL_MENU):
            raise HTTPException(status_code=403, detail="Only staff and managers can view the full menu")

    query = select(MenuItem)

    if scope == MenuScope.AVAILABLE:
        query = query.where(MenuItem.available == True)  # noqa: E712

    if category:
        query = query.where(MenuItem.category == category)

    query = query.order_by(MenuItem.category, MenuItem.name)

    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=MenuItemResponse, status_code=201)
async def create_menu_item(
    item_data: MenuItemCreate,
    current_user: User = Depends(require_capability(Action.MANAGE_MENU)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new menu item"""
    await _ensure_unique_name(db, item_data.name)

    item = MenuItem(**item_data.model_dump())
    db.add(item)
    await _commit(db)
    await db.refresh(item)

    logger.info("Menu item created", item_id=str(item.id), name=item.name)
    return item


@router.get("/{item_id}", response_model=MenuItemResponse)
async def get_menu_item(
    item_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific menu item; unavailable items are hidden from guests and students"""
    item = await _get_item(db, item_id)

    can_see_hidden = current_user is not None and is_allowed(current_user.role, Action.VIEW_FULL_MENU)
    if not item.available and not can_see_hidden:
        raise HTTPException(status_code=404, detail="Menu item not found")

    return item


@router.patch("/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: UUID,
    item_data: MenuItemUpdate,
    current_user: User = Depends(require_capability(Action.MANAGE_MENU)),
    db: AsyncSession = Depends(get_db),
):
    """Update a menu item"""
    item = await _get_item(db, item_id)

    changes = item_data.model_dump(exclude_unset=True)
    if changes.get("name"):
        await _ensure_unique_name(db, changes["name"], exclude_id=item.id)

    for field, value in changes.items():
        if value is None and field != "description":
            continue
        setattr(item, field, value)

    await _commit(db)
    await db.refresh(item)

    return item


@router.patch("/{item_id}/toggle", response_model=MenuItemResponse)
async def toggle_availability(
    item_id: UUID,
    current_user: User = Depends(require_capability(Action.TOGGLE_AVAILABILITY)),
    db: AsyncSession = Depends(get_db),
):
    """Flip a menu item's availability"""
    item = await _get_item(db, item_id)
    item.available = not item.available
    await db.commit()
    await db.refresh(item)

    logger.info("Menu item availability toggled", item_id=str(item.id), available=item.available)
    return item


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_menu_item(
    item_id: UUID,
    current_user: User = Depends(require_capability(Action.MANAGE_MENU)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a menu item permanently; placed orders keep their own copies"""
    item = await _get_item(db, item_id)
    await db.delete(item)
    await db.commit()

    logger.info("Menu item deleted", item_id=str(item_id))
    return MessageResponse(message="Menu item deleted successfully")
