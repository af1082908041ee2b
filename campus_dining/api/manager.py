"""Manager endpoints: users, orders, reports and archive"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.database import get_db
from campus_dining.models.order import OrderStatus
from campus_dining.models.user import User
from campus_dining.schemas.auth import StaffUserCreate, StaffUserUpdate, UserResponse
from campus_dining.schemas.base import MessageResponse
from campus_dining.schemas.order import (
    ArchivedOrderResponse,
    BulkArchiveRequest,
    BulkArchiveResponse,
    DailyReportResponse,
    OrderResponse,
    PurgeResponse,
)
from campus_dining.services import archive as archive_service
from campus_dining.services import lifecycle, reports
from campus_dining.services import users as user_service
from campus_dining.services.permissions import Action
from campus_dining.api.auth import require_capability
from campus_dining.api.presenters import present_many

router = APIRouter()


# ========== USER MANAGEMENT ==========

@router.get("/users", response_model=List[UserResponse])
async def list_users(
    current_user: User = Depends(require_capability(Action.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    """Staff and manager accounts"""
    return await user_service.list_staff(db, current_user)


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: StaffUserCreate,
    current_user: User = Depends(require_capability(Action.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    """Create a staff or manager account"""
    return await user_service.create_staff_user(
        db,
        current_user,
        username=user_data.username,
        password=user_data.password,
        role=user_data.role,
    )


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    user_data: StaffUserUpdate,
    current_user: User = Depends(require_capability(Action.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    """Update username, password or role"""
    user = await user_service.get_user(db, user_id)
    return await user_service.update_staff_user(
        db,
        current_user,
        user,
        username=user_data.username,
        password=user_data.password,
        role=user_data.role,
    )


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_capability(Action.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a user; students with orders are refused"""
    user = await user_service.get_user(db, user_id)
    await user_service.delete_user(db, current_user, user)
    return MessageResponse(message="User deleted successfully")


# ========== ORDER MANAGEMENT ==========

@router.get("/orders", response_model=List[OrderResponse])
async def list_orders(
    status: Optional[OrderStatus] = None,
    current_user: User = Depends(require_capability(Action.MANAGE_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """All live orders with an optional status filter"""
    orders = await lifecycle.list_orders(db, current_user, status=status)
    return await present_many(db, orders)


@router.get("/orders/cancelled", response_model=List[OrderResponse])
async def list_cancelled_orders(
    current_user: User = Depends(require_capability(Action.MANAGE_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """Cancelled orders, most recently cancelled first"""
    orders = await lifecycle.list_orders(
        db, current_user, status=OrderStatus.CANCELLED, newest_cancelled_first=True
    )
    return await present_many(db, orders)


@router.delete("/orders/cancelled", response_model=PurgeResponse)
async def clear_cancelled_orders(
    current_user: User = Depends(require_capability(Action.MANAGE_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """Permanently delete all cancelled orders"""
    deleted = await lifecycle.purge_cancelled(db, current_user)
    return PurgeResponse(
        message=f"Successfully deleted {deleted} cancelled order(s)",
        deleted_count=deleted,
    )


# ========== REPORTS ==========

@router.get("/reports", response_model=DailyReportResponse)
async def get_daily_report(
    date: Optional[date] = None,
    current_user: User = Depends(require_capability(Action.VIEW_REPORTS)),
    db: AsyncSession = Depends(get_db),
):
    """Order counts and revenue for one day (default: today)"""
    report = await reports.daily_report(db, current_user, date)
    report["orders"] = await present_many(db, report["orders"])
    return DailyReportResponse(**report)


# ========== ARCHIVE ==========

@router.post("/archive/bulk", response_model=BulkArchiveResponse)
async def bulk_archive_orders(
    data: BulkArchiveRequest,
    current_user: User = Depends(require_capability(Action.ARCHIVE_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """Archive picked orders older than daysOld days (0 = all picked orders)"""
    result = await archive_service.bulk_archive(db, current_user, data.days_old)
    return BulkArchiveResponse(**result)


@router.post("/archive/{order_ref}", response_model=MessageResponse)
async def archive_order(
    order_ref: str,
    current_user: User = Depends(require_capability(Action.ARCHIVE_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """Archive one picked order, by internal id or orderId"""
    order = await archive_service.find_order(db, order_ref)
    await archive_service.archive_order(db, order, current_user)
    return MessageResponse(message="Order archived successfully")


@router.get("/archive", response_model=List[ArchivedOrderResponse])
async def list_archived_orders(
    date: Optional[date] = None,
    current_user: User = Depends(require_capability(Action.ARCHIVE_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """Archived orders, optionally those created on one day"""
    archived = await archive_service.list_archived(db, current_user, date)
    return await present_many(db, archived, ArchivedOrderResponse)
