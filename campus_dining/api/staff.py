"""Staff order endpoints (staff and managers)"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.database import get_db
from campus_dining.models.order import OrderStatus
from campus_dining.models.user import User
from campus_dining.schemas.order import OrderResponse, OrderStatusUpdate
from campus_dining.services import lifecycle
from campus_dining.services.permissions import Action
from campus_dining.api.auth import require_capability
from campus_dining.api.presenters import present, present_many

router = APIRouter()


@router.get("/orders", response_model=List[OrderResponse])
async def list_orders(
    status: Optional[OrderStatus] = None,
    current_user: User = Depends(require_capability(Action.LIST_ALL_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """All live orders, newest first"""
    orders = await lifecycle.list_orders(db, current_user, status=status)
    return await present_many(db, orders)


@router.get("/orders/cancelled", response_model=List[OrderResponse])
async def list_cancelled_orders(
    current_user: User = Depends(require_capability(Action.LIST_ALL_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """Cancelled orders, most recently cancelled first"""
    orders = await lifecycle.list_orders(
        db, current_user, status=OrderStatus.CANCELLED, newest_cancelled_first=True
    )
    return await present_many(db, orders)


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdate,
    current_user: User = Depends(require_capability(Action.ADVANCE_STATUS)),
    db: AsyncSession = Depends(get_db),
):
    """Advance an order one step along its lifecycle"""
    order = await lifecycle.get_order(db, order_id)
    order = await lifecycle.update_status(db, order, current_user, data.status)
    return await present(db, order)


@router.patch("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: UUID,
    current_user: User = Depends(require_capability(Action.ADVANCE_STATUS)),
    db: AsyncSession = Depends(get_db),
):
    """Cancel any pending, preparing or ready order"""
    # Gated on a staff-only capability so students keep using /api/orders
    order = await lifecycle.get_order(db, order_id)
    order = await lifecycle.cancel_order(db, order, current_user)
    return await present(db, order)
