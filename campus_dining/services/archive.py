"""Archival of picked orders into long-term storage"""

from datetime import date, timedelta
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.errors import NotFound, PolicyViolation, ValidationFailed
from campus_dining.models.order import Order, ArchivedOrder, OrderStatus
from campus_dining.models.user import User
from campus_dining.services.clock import day_bounds, local_midnight_utc, local_today
from campus_dining.services.permissions import Action, ensure_allowed

logger = structlog.get_logger()


async def find_order(db: AsyncSession, ref: str) -> Order:
    """Look up a live order by internal UUID or by its human orderId"""
    try:
        condition = Order.id == UUID(ref)
    except ValueError:
        condition = Order.order_id == ref

    result = await db.execute(select(Order).where(condition))
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFound("Order not found")
    return order


async def is_archived(db: AsyncSession, order_id: str) -> bool:
    result = await db.execute(select(ArchivedOrder.id).where(ArchivedOrder.order_id == order_id))
    return result.scalar_one_or_none() is not None


async def _move_to_archive(db: AsyncSession, order: Order) -> ArchivedOrder:
    """Stage snapshot insert and live delete; the caller commits both together"""
    archived = ArchivedOrder.snapshot(order)
    db.add(archived)
    await db.delete(order)
    await db.flush()
    return archived


async def archive_order(db: AsyncSession, order: Order, actor: User) -> ArchivedOrder:
    """Archive a single picked order"""
    ensure_allowed(actor, Action.ARCHIVE_ORDERS)

    if order.status != OrderStatus.PICKED:
        raise PolicyViolation("Only picked orders can be archived")

    if await is_archived(db, order.order_id):
        raise PolicyViolation("Order already archived")

    try:
        archived = await _move_to_archive(db, order)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    logger.info("Order archived", order_id=archived.order_id, actor_id=str(actor.id))
    return archived


def bulk_cutoff(days_old: int) -> Optional[date]:
    """Local day before which picked orders qualify; None means no age filter"""
    if days_old == 0:
        return None
    return local_today() - timedelta(days=days_old)


async def bulk_archive(db: AsyncSession, actor: User, days_old: Optional[int]) -> dict:
    """
    Archive every picked order older than ``days_old`` days.

    ``days_old == 0`` archives all picked orders. Each order moves in its own
    transaction and failures are collected without stopping the batch.

    ``skipped_count`` covers every candidate left in place: orders already
    present in the archive, and orders deleted or moved out of ``picked``
    after the candidate query ran. The two are logged separately.
    """
    ensure_allowed(actor, Action.ARCHIVE_ORDERS)

    if days_old is None or days_old < 0:
        raise ValidationFailed("Please provide a valid number of days (0 or greater)")

    query = select(Order.id).where(Order.status == OrderStatus.PICKED)
    cutoff_day = bulk_cutoff(days_old)
    if cutoff_day is not None:
        query = query.where(Order.created_at < local_midnight_utc(cutoff_day))

    candidate_ids = list((await db.execute(query)).scalars().all())

    archived_count = 0
    already_archived = 0
    no_longer_eligible = 0
    errors: List[dict] = []

    for candidate_id in candidate_ids:
        order = await db.get(Order, candidate_id)
        if order is None or order.status != OrderStatus.PICKED:
            no_longer_eligible += 1
            continue

        order_ref = order.order_id
        try:
            if await is_archived(db, order_ref):
                already_archived += 1
                continue
            await _move_to_archive(db, order)
            await db.commit()
            archived_count += 1
        except SQLAlchemyError as exc:
            await db.rollback()
            errors.append({"order_id": order_ref, "error": str(exc)})
            logger.warning("Failed to archive order", order_id=order_ref, error=str(exc))

    logger.info(
        "Bulk archive finished",
        days_old=days_old,
        total_found=len(candidate_ids),
        archived=archived_count,
        already_archived=already_archived,
        no_longer_eligible=no_longer_eligible,
        failed=len(errors),
    )

    if candidate_ids:
        message = f"Successfully archived {archived_count} order(s)"
    else:
        message = "No orders found to archive"

    return {
        "message": message,
        "archived_count": archived_count,
        "skipped_count": already_archived + no_longer_eligible,
        "total_found": len(candidate_ids),
        "errors": errors,
    }


async def list_archived(db: AsyncSession, actor: User, day: Optional[date] = None) -> List[ArchivedOrder]:
    """Archived orders, optionally only those created on a given local day"""
    ensure_allowed(actor, Action.ARCHIVE_ORDERS)

    query = select(ArchivedOrder)
    if day:
        start, end = day_bounds(day)
        query = query.where(ArchivedOrder.created_at >= start, ArchivedOrder.created_at <= end)
    query = query.order_by(ArchivedOrder.archived_at.desc())

    result = await db.execute(query)
    return list(result.scalars().all())
