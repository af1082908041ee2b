"""Daily order and revenue rollups"""

from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.models.order import Order, OrderStatus, ACTIVE_STATUSES, items_total
from campus_dining.models.user import User
from campus_dining.services.clock import day_bounds, local_today
from campus_dining.services.permissions import Action, ensure_allowed


def summarize(orders: List[Order]) -> dict:
    """Counts and revenue over a set of orders; only picked orders earn revenue"""
    picked = [order for order in orders if order.status == OrderStatus.PICKED]
    return {
        "total_orders": len(orders),
        "completed_orders": len(picked),
        "pending_orders": sum(1 for order in orders if order.status in ACTIVE_STATUSES),
        "cancelled_orders": sum(1 for order in orders if order.status == OrderStatus.CANCELLED),
        "total_revenue": round(sum(items_total(order.items) for order in picked), 2),
    }


async def daily_report(db: AsyncSession, actor: User, day: Optional[date] = None) -> dict:
    """Summary of orders created on ``day`` (default: today, local time)"""
    ensure_allowed(actor, Action.VIEW_REPORTS)

    day = day or local_today()
    start, end = day_bounds(day)

    result = await db.execute(
        select(Order)
        .where(Order.created_at >= start, Order.created_at <= end)
        .order_by(Order.created_at.desc())
    )
    orders = list(result.scalars().all())

    return {"date": day, **summarize(orders), "orders": orders}
