"""Pydantic schemas for request/response validation"""

from campus_dining.schemas.base import CamelModel, MessageResponse
from campus_dining.schemas.auth import (
    Token,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    UserResponse,
    StaffUserCreate,
    StaffUserUpdate,
)
from campus_dining.schemas.menu import (
    MenuItemCreate,
    MenuItemUpdate,
    MenuItemResponse,
)
from campus_dining.schemas.order import (
    OrderItem,
    OrderCreate,
    OrderUpdate,
    OrderStatusUpdate,
    OrderOwner,
    OrderResponse,
    ArchivedOrderResponse,
    DailyReportResponse,
    BulkArchiveRequest,
    BulkArchiveResponse,
    PurgeResponse,
)

__all__ = [
    "CamelModel",
    "MessageResponse",
    "Token",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "UserResponse",
    "StaffUserCreate",
    "StaffUserUpdate",
    "MenuItemCreate",
    "MenuItemUpdate",
    "MenuItemResponse",
    "OrderItem",
    "OrderCreate",
    "OrderUpdate",
    "OrderStatusUpdate",
    "OrderOwner",
    "OrderResponse",
    "ArchivedOrderResponse",
    "DailyReportResponse",
    "BulkArchiveRequest",
    "BulkArchiveResponse",
    "PurgeResponse",
]
