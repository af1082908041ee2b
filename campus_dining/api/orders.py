"""Student order endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.database import get_db
from campus_dining.models.user import User
from campus_dining.schemas.order import OrderCreate, OrderUpdate, OrderResponse
from campus_dining.services import lifecycle
from campus_dining.services.permissions import Action
from campus_dining.api.auth import get_current_user, require_capability
from campus_dining.api.presenters import present, present_many

router = APIRouter()


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    order_data: OrderCreate,
    current_user: User = Depends(require_capability(Action.PLACE_ORDER)),
    db: AsyncSession = Depends(get_db),
):
    """Place a new order"""
    order = await lifecycle.place_order(
        db,
        current_user,
        items=[item.model_dump() for item in order_data.items],
        pickup_time=order_data.pickup_time,
        special_instructions=order_data.special_instructions,
    )
    return await present(db, order)


@router.get("/current", response_model=List[OrderResponse])
async def get_current_orders(
    current_user: User = Depends(require_capability(Action.LIST_OWN_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """Orders still in progress (pending, preparing, ready)"""
    orders = await lifecycle.list_orders_for_student(db, current_user, active=True)
    return await present_many(db, orders)


@router.get("/history", response_model=List[OrderResponse])
async def get_order_history(
    current_user: User = Depends(require_capability(Action.LIST_OWN_ORDERS)),
    db: AsyncSession = Depends(get_db),
):
    """Finished orders (picked, cancelled)"""
    orders = await lifecycle.list_orders_for_student(db, current_user, active=False)
    return await present_many(db, orders)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get order details; students only see their own"""
    order = await lifecycle.get_order_for(db, order_id, current_user)
    return await present(db, order)


@router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: UUID,
    order_data: OrderUpdate,
    current_user: User = Depends(require_capability(Action.EDIT_ORDER)),
    db: AsyncSession = Depends(get_db),
):
    """Edit items, pickup time or instructions while pending"""
    order = await lifecycle.get_order(db, order_id)
    changes = order_data.model_dump(exclude_unset=True)
    order = await lifecycle.edit_order(db, order, current_user, changes)
    return await present(db, order)


@router.patch("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: UUID,
    current_user: User = Depends(require_capability(Action.EDIT_ORDER)),
    db: AsyncSession = Depends(get_db),
):
    """Cancel a pending order"""
    # Student-only route; staff and managers cancel through /api/staff
    order = await lifecycle.get_order(db, order_id)
    order = await lifecycle.cancel_order(db, order, current_user)
    return await present(db, order)
