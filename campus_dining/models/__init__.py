"""Database models"""

from campus_dining.models.user import User, UserRole
from campus_dining.models.menu import MenuItem
from campus_dining.models.order import Order, ArchivedOrder, OrderStatus

__all__ = [
    "User",
    "UserRole",
    "MenuItem",
    "Order",
    "ArchivedOrder",
    "OrderStatus",
]
