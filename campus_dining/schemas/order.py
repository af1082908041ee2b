"""Order schemas"""

from datetime import date, datetime
from typing import Optional, List
from uuid import UUID
from pydantic import Field

from campus_dining.models.order import OrderStatus
from campus_dining.models.user import UserRole
from campus_dining.schemas.base import CamelModel


class OrderItem(CamelModel):
    """Line item; a value copy of the menu entry at order time"""
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)


class OrderCreate(CamelModel):
    """Create order request"""
    items: List[OrderItem] = Field(..., min_length=1)
    pickup_time: str = Field(..., min_length=1)
    special_instructions: Optional[str] = ""


class OrderUpdate(CamelModel):
    """Edit a pending order"""
    items: Optional[List[OrderItem]] = Field(None, min_length=1)
    pickup_time: Optional[str] = Field(None, min_length=1)
    special_instructions: Optional[str] = None


class OrderStatusUpdate(CamelModel):
    """Staff status change"""
    status: OrderStatus


class OrderOwner(CamelModel):
    """Owner details resolved at read time"""
    id: UUID
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class OrderResponse(CamelModel):
    """Order response"""
    id: UUID
    order_id: str
    user_id: UUID
    user: Optional[OrderOwner] = None
    items: List[OrderItem]
    total: float
    pickup_time: str
    special_instructions: str
    status: OrderStatus
    cancelled_at: Optional[datetime] = None
    canceled_by: Optional[UserRole] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ArchivedOrderResponse(CamelModel):
    """Archived order response"""
    id: UUID
    order_id: str
    user_id: UUID
    user: Optional[OrderOwner] = None
    items: List[OrderItem]
    total: float
    pickup_time: str
    special_instructions: str
    status: OrderStatus
    created_at: datetime
    cancelled_at: Optional[datetime] = None
    canceled_by: Optional[UserRole] = None
    archived_at: datetime


class DailyReportResponse(CamelModel):
    """Daily report"""
    report_date: date = Field(..., alias="date")
    total_orders: int
    completed_orders: int
    pending_orders: int
    cancelled_orders: int
    total_revenue: float
    orders: List[OrderResponse]


class BulkArchiveRequest(CamelModel):
    """Bulk archive request; 0 archives every picked order"""
    days_old: Optional[int] = None


class BulkArchiveError(CamelModel):
    order_id: str
    error: str


class BulkArchiveResponse(CamelModel):
    """Bulk archive outcome; partial success is normal"""
    message: str
    archived_count: int
    skipped_count: int
    total_found: int
    errors: List[BulkArchiveError] = []


class PurgeResponse(CamelModel):
    message: str
    deleted_count: int
