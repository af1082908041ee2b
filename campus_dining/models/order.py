"""Order and archived order models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, Text, Enum, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
import enum

from campus_dining.database import Base, enum_values
from campus_dining.models.user import UserRole


class OrderStatus(str, enum.Enum):
    """Order lifecycle states"""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    PICKED = "picked"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY)
TERMINAL_STATUSES = (OrderStatus.PICKED, OrderStatus.CANCELLED)


def items_total(items) -> float:
    """Sum of price * quantity over line items, rounded to cents"""
    return round(
        sum(float(item.get("price", 0)) * int(item.get("quantity", 0)) for item in items or []),
        2,
    )


class Order(Base):
    """Live student orders"""
    __tablename__ = "orders"
    __table_args__ = (
        Index("ix_orders_user_id_status", "user_id", "status"),
        Index("ix_orders_status", "status"),
        Index("ix_orders_created_at_status", "created_at", "status"),
        CheckConstraint(
            "(status = 'cancelled' AND cancelled_at IS NOT NULL AND canceled_by IS NOT NULL)"
            " OR (status != 'cancelled' AND cancelled_at IS NULL AND canceled_by IS NULL)",
            name="ck_orders_cancellation_fields",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(String(40), unique=True, nullable=False)

    # Owner; no foreign key so staff/manager accounts can be removed
    user_id = Column(UUID(as_uuid=True), nullable=False)

    # [{"name": "Burger", "quantity": 1, "price": 5.99}, ...]
    items = Column(JSON, nullable=False, default=list)

    pickup_time = Column(String(50), nullable=False)
    special_instructions = Column(Text, nullable=False, default="")

    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=enum_values),
        nullable=False,
        default=OrderStatus.PENDING,
    )

    # Cancellation
    cancelled_at = Column(DateTime)
    canceled_by = Column(Enum(UserRole, name="user_role", values_callable=enum_values))

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def total(self) -> float:
        return items_total(self.items)


class ArchivedOrder(Base):
    """Immutable snapshot of a picked order moved out of the live table"""
    __tablename__ = "archived_orders"
    __table_args__ = (
        Index("ix_archived_orders_created_at", "created_at"),
        Index("ix_archived_orders_archived_at", "archived_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(String(40), unique=True, nullable=False)
    user_id = Column(UUID(as_uuid=True), nullable=False)
    items = Column(JSON, nullable=False, default=list)
    pickup_time = Column(String(50), nullable=False)
    special_instructions = Column(Text, nullable=False, default="")
    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=enum_values),
        nullable=False,
        default=OrderStatus.PICKED,
    )
    created_at = Column(DateTime, nullable=False)
    cancelled_at = Column(DateTime)
    canceled_by = Column(Enum(UserRole, name="user_role", values_callable=enum_values))
    archived_at = Column(DateTime, default=datetime.utcnow)

    @property
    def total(self) -> float:
        return items_total(self.items)

    @classmethod
    def snapshot(cls, order: Order) -> "ArchivedOrder":
        """Copy a live order into a new archive record"""
        return cls(
            order_id=order.order_id,
            user_id=order.user_id,
            items=[dict(item) for item in order.items or []],
            pickup_time=order.pickup_time,
            special_instructions=order.special_instructions or "",
            status=order.status,
            created_at=order.created_at,
            cancelled_at=order.cancelled_at,
            canceled_by=order.canceled_by,
            archived_at=datetime.utcnow(),
        )
