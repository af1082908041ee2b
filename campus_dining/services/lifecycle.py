"""
Order lifecycle.

Status machine::

    pending -> preparing -> ready -> picked
    pending | preparing | ready -> cancelled

``picked`` and ``cancelled`` are terminal. Students may only touch their own
``pending`` orders; staff and managers drive every other transition.
"""

import secrets
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.config import settings
from campus_dining.errors import InvalidTransition, NotFound, PolicyViolation, ValidationFailed
from campus_dining.models.order import Order, ArchivedOrder, OrderStatus, ACTIVE_STATUSES, TERMINAL_STATUSES
from campus_dining.models.user import User, UserRole
from campus_dining.services.permissions import Action, ensure_allowed

logger = structlog.get_logger()


NEXT_STATUS: Dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.PICKED,
}

EDITABLE_FIELDS = ("items", "pickup_time", "special_instructions")


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def allowed_targets(current: OrderStatus) -> FrozenSet[OrderStatus]:
    """Statuses reachable from ``current`` in one step"""
    if is_terminal(current):
        return frozenset()
    return frozenset({NEXT_STATUS[current], OrderStatus.CANCELLED})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in allowed_targets(current)


def check_transition(current: OrderStatus, target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(current, target)


def apply_cancellation(order: Order, role: UserRole, now: Optional[datetime] = None) -> None:
    """Move an order to cancelled and record when and by whom"""
    check_transition(order.status, OrderStatus.CANCELLED)
    order.status = OrderStatus.CANCELLED
    order.cancelled_at = now or datetime.utcnow()
    order.canceled_by = role


def apply_status(order: Order, target: OrderStatus, role: UserRole, now: Optional[datetime] = None) -> None:
    """Apply a single legal transition, including its side effects"""
    if target == OrderStatus.CANCELLED:
        apply_cancellation(order, role, now)
        return
    check_transition(order.status, target)
    order.status = target


def generate_order_id(now: Optional[datetime] = None) -> str:
    """Human-facing order reference, e.g. ORD-20240115-3F9A1C"""
    stamp = (now or datetime.utcnow()).strftime("%Y%m%d")
    return f"{settings.order_id_prefix}-{stamp}-{secrets.token_hex(3).upper()}"


def _validate_items(items: List[dict]) -> List[dict]:
    if not items:
        raise ValidationFailed("Order must contain at least one item")
    cleaned = []
    for item in items:
        name = (item.get("name") or "").strip()
        quantity = item.get("quantity")
        price = item.get("price")
        if not name:
            raise ValidationFailed("Each item needs a name")
        if quantity is None or int(quantity) < 1:
            raise ValidationFailed(f"Quantity for {name} must be at least 1")
        if price is None or float(price) < 0:
            raise ValidationFailed(f"Price for {name} cannot be negative")
        cleaned.append({"name": name, "quantity": int(quantity), "price": float(price)})
    return cleaned


async def get_order(db: AsyncSession, order_id: UUID) -> Order:
    result = await db.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFound("Order not found")
    return order


async def get_order_for(db: AsyncSession, order_id: UUID, actor: User) -> Order:
    """Load an order the actor is allowed to see"""
    order = await get_order(db, order_id)
    ensure_allowed(actor, Action.VIEW_ORDER, owner_id=order.user_id)
    return order


async def _order_id_taken(db: AsyncSession, candidate: str) -> bool:
    """orderIds are unique across live and archived orders"""
    for model in (Order, ArchivedOrder):
        existing = await db.execute(select(model.id).where(model.order_id == candidate))
        if existing.scalar_one_or_none() is not None:
            return True
    return False


async def _unused_order_id(db: AsyncSession) -> str:
    while True:
        candidate = generate_order_id()
        if not await _order_id_taken(db, candidate):
            return candidate


async def place_order(
    db: AsyncSession,
    actor: User,
    items: List[dict],
    pickup_time: str,
    special_instructions: Optional[str] = None,
) -> Order:
    """Create a pending order owned by the acting student"""
    ensure_allowed(actor, Action.PLACE_ORDER)

    if not pickup_time or not pickup_time.strip():
        raise ValidationFailed("Pickup time is required")

    order = Order(
        order_id=await _unused_order_id(db),
        user_id=actor.id,
        items=_validate_items(items),
        pickup_time=pickup_time.strip(),
        special_instructions=special_instructions or "",
        status=OrderStatus.PENDING,
        created_at=datetime.utcnow(),
    )
    db.add(order)
    await db.commit()
    await db.refresh(order)

    logger.info(
        "Order placed",
        order_id=order.order_id,
        user_id=str(actor.id),
        item_count=len(order.items),
        total=order.total,
    )
    return order


async def edit_order(db: AsyncSession, order: Order, actor: User, changes: dict) -> Order:
    """Change items, pickup time or instructions of a pending order"""
    ensure_allowed(actor, Action.EDIT_ORDER, owner_id=order.user_id)

    if order.status != OrderStatus.PENDING:
        raise PolicyViolation("Only pending orders can be edited")

    if "items" in changes and changes["items"] is not None:
        order.items = _validate_items(changes["items"])
    if "pickup_time" in changes and changes["pickup_time"] is not None:
        if not changes["pickup_time"].strip():
            raise ValidationFailed("Pickup time is required")
        order.pickup_time = changes["pickup_time"].strip()
    if "special_instructions" in changes:
        order.special_instructions = changes["special_instructions"] or ""

    await db.commit()
    await db.refresh(order)

    logger.info("Order edited", order_id=order.order_id, fields=sorted(k for k in changes if k in EDITABLE_FIELDS))
    return order


async def update_status(db: AsyncSession, order: Order, actor: User, target: OrderStatus) -> Order:
    """Staff/manager status change; a cancelled target is handled as a cancellation"""
    if target == OrderStatus.CANCELLED:
        return await cancel_order(db, order, actor)

    ensure_allowed(actor, Action.ADVANCE_STATUS)

    previous = order.status
    apply_status(order, target, actor.role)
    await db.commit()
    await db.refresh(order)

    logger.info(
        "Order status changed",
        order_id=order.order_id,
        from_status=previous.value,
        to_status=target.value,
        actor_role=actor.role.value,
    )
    return order


async def cancel_order(db: AsyncSession, order: Order, actor: User) -> Order:
    """Cancel an order; students may only cancel their own pending orders"""
    ensure_allowed(actor, Action.CANCEL_ORDER, owner_id=order.user_id)

    if actor.role == UserRole.STUDENT and order.status != OrderStatus.PENDING:
        raise PolicyViolation("Only pending orders can be cancelled")

    previous = order.status
    apply_cancellation(order, actor.role)
    await db.commit()
    await db.refresh(order)

    logger.info(
        "Order cancelled",
        order_id=order.order_id,
        from_status=previous.value,
        canceled_by=actor.role.value,
    )
    return order


async def list_orders_for_student(db: AsyncSession, actor: User, active: bool) -> List[Order]:
    """Current (non-terminal) or history (terminal) orders of one student"""
    ensure_allowed(actor, Action.LIST_OWN_ORDERS)
    statuses = ACTIVE_STATUSES if active else TERMINAL_STATUSES
    result = await db.execute(
        select(Order)
        .where(Order.user_id == actor.id, Order.status.in_(statuses))
        .order_by(Order.created_at.desc())
    )
    return list(result.scalars().all())


async def list_orders(
    db: AsyncSession,
    actor: User,
    status: Optional[OrderStatus] = None,
    newest_cancelled_first: bool = False,
) -> List[Order]:
    """All live orders, optionally filtered by status"""
    ensure_allowed(actor, Action.LIST_ALL_ORDERS)
    query = select(Order)
    if status:
        query = query.where(Order.status == status)
    if newest_cancelled_first:
        query = query.order_by(Order.cancelled_at.desc(), Order.created_at.desc())
    else:
        query = query.order_by(Order.created_at.desc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def purge_cancelled(db: AsyncSession, actor: User) -> int:
    """Permanently delete every cancelled order; returns how many were removed"""
    ensure_allowed(actor, Action.MANAGE_ORDERS)
    result = await db.execute(delete(Order).where(Order.status == OrderStatus.CANCELLED))
    await db.commit()

    deleted = result.rowcount or 0
    logger.info("Cancelled orders purged", deleted=deleted, actor_id=str(actor.id))
    return deleted
