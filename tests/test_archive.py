"""Tests for order archival"""

from datetime import date, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from campus_dining.models.order import ArchivedOrder, Order, OrderStatus
from campus_dining.services.clock import day_bounds


async def _live_ids(test_db):
    result = await test_db.execute(select(Order.id))
    return set(result.scalars().all())


@pytest.mark.asyncio
async def test_archive_picked_order(client: AsyncClient, test_db, test_student, manager_headers, make_order):
    """Archiving moves the order out of the live table"""
    order = await make_order(test_student, OrderStatus.PICKED)

    response = await client.post(f"/api/manager/archive/{order.id}", headers=manager_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Order archived successfully"
    assert order.id not in await _live_ids(test_db)

    archived = await client.get("/api/manager/archive", headers=manager_headers)
    data = archived.json()
    assert len(data) == 1
    assert data[0]["orderId"] == order.order_id
    assert data[0]["total"] == 8.99
    assert data[0]["user"]["username"] == test_student.username
    assert data[0]["archivedAt"] is not None


@pytest.mark.asyncio
async def test_archive_by_order_reference(client: AsyncClient, test_student, manager_headers, make_order):
    order = await make_order(test_student, OrderStatus.PICKED)

    response = await client.post(f"/api/manager/archive/{order.order_id}", headers=manager_headers)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_only_picked_orders_archived(client: AsyncClient, test_db, test_student, manager_headers, make_order):
    order = await make_order(test_student, OrderStatus.READY)

    response = await client.post(f"/api/manager/archive/{order.id}", headers=manager_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Only picked orders can be archived"
    assert order.id in await _live_ids(test_db)


@pytest.mark.asyncio
async def test_archive_unknown_order(client: AsyncClient, manager_headers):
    response = await client.post("/api/manager/archive/ORD-19990101-FFFFFF", headers=manager_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_already_archived_order_rejected(client: AsyncClient, test_db, test_student, manager_headers, make_order):
    order = await make_order(test_student, OrderStatus.PICKED)
    test_db.add(ArchivedOrder.snapshot(order))
    await test_db.commit()

    response = await client.post(f"/api/manager/archive/{order.id}", headers=manager_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Order already archived"
    assert order.id in await _live_ids(test_db)


@pytest.mark.asyncio
async def test_staff_cannot_archive(client: AsyncClient, test_student, staff_headers, make_order):
    order = await make_order(test_student, OrderStatus.PICKED)

    response = await client.post(f"/api/manager/archive/{order.id}", headers=staff_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_bulk_archive_respects_age(client: AsyncClient, test_db, test_student, manager_headers, make_order):
    now = datetime.utcnow()
    old_picked = await make_order(test_student, OrderStatus.PICKED, created_at=now - timedelta(days=40))
    recent_picked = await make_order(test_student, OrderStatus.PICKED, created_at=now - timedelta(days=5))
    old_pending = await make_order(test_student, OrderStatus.PENDING, created_at=now - timedelta(days=40))

    response = await client.post("/api/manager/archive/bulk", json={"daysOld": 30}, headers=manager_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Successfully archived 1 order(s)"
    assert data["archivedCount"] == 1
    assert data["skippedCount"] == 0
    assert data["totalFound"] == 1
    assert data["errors"] == []

    live = await _live_ids(test_db)
    assert old_picked.id not in live
    assert recent_picked.id in live
    assert old_pending.id in live


@pytest.mark.asyncio
async def test_bulk_archive_zero_days_takes_all_picked(client: AsyncClient, test_db, test_student, manager_headers, make_order):
    await make_order(test_student, OrderStatus.PICKED)
    await make_order(test_student, OrderStatus.PICKED, created_at=datetime.utcnow() - timedelta(days=3))
    cancelled = await make_order(test_student, OrderStatus.CANCELLED)

    response = await client.post("/api/manager/archive/bulk", json={"daysOld": 0}, headers=manager_headers)

    data = response.json()
    assert data["archivedCount"] == 2
    assert await _live_ids(test_db) == {cancelled.id}


@pytest.mark.asyncio
async def test_bulk_archive_skips_already_archived(client: AsyncClient, test_db, test_student, manager_headers, make_order):
    duplicate = await make_order(test_student, OrderStatus.PICKED)
    await make_order(test_student, OrderStatus.PICKED)
    test_db.add(ArchivedOrder.snapshot(duplicate))
    await test_db.commit()

    response = await client.post("/api/manager/archive/bulk", json={"daysOld": 0}, headers=manager_headers)

    data = response.json()
    assert data["totalFound"] == 2
    assert data["archivedCount"] == 1
    assert data["skippedCount"] == 1


@pytest.mark.asyncio
async def test_bulk_archive_nothing_to_do(client: AsyncClient, manager_headers):
    response = await client.post("/api/manager/archive/bulk", json={"daysOld": 7}, headers=manager_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "No orders found to archive"
    assert data["totalFound"] == 0


@pytest.mark.parametrize("payload", [{}, {"daysOld": -1}])
@pytest.mark.asyncio
async def test_bulk_archive_requires_valid_days(client: AsyncClient, manager_headers, payload):
    response = await client.post("/api/manager/archive/bulk", json=payload, headers=manager_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Please provide a valid number of days (0 or greater)"


@pytest.mark.asyncio
async def test_list_archive_by_day(client: AsyncClient, test_student, manager_headers, make_order):
    march = await make_order(test_student, OrderStatus.PICKED, created_at=day_bounds(date(2024, 3, 15))[0] + timedelta(hours=12))
    await make_order(test_student, OrderStatus.PICKED, created_at=day_bounds(date(2024, 3, 10))[0] + timedelta(hours=12))
    await client.post("/api/manager/archive/bulk", json={"daysOld": 0}, headers=manager_headers)

    response = await client.get("/api/manager/archive", params={"date": "2024-03-15"}, headers=manager_headers)

    assert response.status_code == 200
    assert [o["orderId"] for o in response.json()] == [march.order_id]


@pytest.mark.asyncio
async def test_new_order_id_avoids_archived_ids(client: AsyncClient, test_student, student_headers, manager_headers, make_order, monkeypatch):
    """A generated orderId already used in the archive is never handed out again"""
    old = await make_order(test_student, OrderStatus.PICKED)
    archived_ref = old.order_id
    await client.post(f"/api/manager/archive/{old.id}", headers=manager_headers)

    candidates = iter([archived_ref, "ORD-20240101-A1B2C3"])
    monkeypatch.setattr("campus_dining.services.lifecycle.generate_order_id", lambda now=None: next(candidates))

    placed = await client.post(
        "/api/orders",
        json={"items": [{"name": "Burger", "quantity": 1, "price": 5.99}], "pickupTime": "12:00"},
        headers=student_headers,
    )

    assert placed.status_code == 201
    assert placed.json()["orderId"] == "ORD-20240101-A1B2C3"


@pytest.mark.asyncio
async def test_bulk_archive_counts_vanished_candidates_as_skipped(client: AsyncClient, test_db, test_student, manager_headers, make_order, monkeypatch):
    """An order removed after the candidate query is left alone and reported as skipped"""
    vanished = await make_order(test_student, OrderStatus.PICKED)
    kept = await make_order(test_student, OrderStatus.PICKED)
    real_get = test_db.get

    async def get_without_vanished(entity, ident, **kwargs):
        if ident == vanished.id:
            return None
        return await real_get(entity, ident, **kwargs)

    monkeypatch.setattr(test_db, "get", get_without_vanished)

    response = await client.post("/api/manager/archive/bulk", json={"daysOld": 0}, headers=manager_headers)

    data = response.json()
    assert data["totalFound"] == 2
    assert data["archivedCount"] == 1
    assert data["skippedCount"] == 1
    assert data["errors"] == []
    assert await _live_ids(test_db) == {vanished.id}

    archived = await client.get("/api/manager/archive", headers=manager_headers)
    assert [o["orderId"] for o in archived.json()] == [kept.order_id]
