"""Tests for staff order fulfilment endpoints"""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from campus_dining.models.order import OrderStatus


@pytest.mark.asyncio
async def test_list_all_orders(client: AsyncClient, test_student, other_student, staff_headers, make_order):
    """Staff see every student's orders, newest first"""
    now = datetime.utcnow()
    older = await make_order(test_student, created_at=now - timedelta(hours=2))
    newer = await make_order(other_student, created_at=now - timedelta(hours=1))

    response = await client.get("/api/staff/orders", headers=staff_headers)

    assert response.status_code == 200
    ids = [o["id"] for o in response.json()]
    assert ids == [str(newer.id), str(older.id)]


@pytest.mark.asyncio
async def test_filter_orders_by_status(client: AsyncClient, test_student, staff_headers, make_order):
    await make_order(test_student, OrderStatus.PENDING)
    ready = await make_order(test_student, OrderStatus.READY)

    response = await client.get("/api/staff/orders", params={"status": "ready"}, headers=staff_headers)

    assert response.status_code == 200
    assert [o["id"] for o in response.json()] == [str(ready.id)]


@pytest.mark.asyncio
async def test_student_cannot_list_all_orders(client: AsyncClient, student_headers):
    response = await client.get("/api/staff/orders", headers=student_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_advance_through_lifecycle(client: AsyncClient, test_student, staff_headers, make_order):
    order = await make_order(test_student)

    for target in ("preparing", "ready", "picked"):
        response = await client.patch(
            f"/api/staff/orders/{order.id}/status",
            json={"status": target},
            headers=staff_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == target


@pytest.mark.asyncio
async def test_cannot_skip_a_step(client: AsyncClient, test_student, staff_headers, make_order):
    order = await make_order(test_student)

    response = await client.patch(
        f"/api/staff/orders/{order.id}/status",
        json={"status": "ready"},
        headers=staff_headers,
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot change order status from pending to ready"


@pytest.mark.asyncio
async def test_picked_is_terminal(client: AsyncClient, test_student, staff_headers, make_order):
    order = await make_order(test_student, OrderStatus.PICKED)

    response = await client.patch(
        f"/api/staff/orders/{order.id}/status",
        json={"status": "pending"},
        headers=staff_headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_status_value_rejected(client: AsyncClient, test_student, staff_headers, make_order):
    order = await make_order(test_student)

    response = await client.patch(
        f"/api/staff/orders/{order.id}/status",
        json={"status": "delivered"},
        headers=staff_headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_status_update_to_cancelled_records_canceller(client: AsyncClient, test_student, staff_headers, make_order):
    order = await make_order(test_student, OrderStatus.PREPARING)

    response = await client.patch(
        f"/api/staff/orders/{order.id}/status",
        json={"status": "cancelled"},
        headers=staff_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled"
    assert data["canceledBy"] == "staff"
    assert data["cancelledAt"] is not None


@pytest.mark.asyncio
async def test_staff_cancels_ready_order(client: AsyncClient, test_student, staff_headers, make_order):
    order = await make_order(test_student, OrderStatus.READY)

    response = await client.patch(f"/api/staff/orders/{order.id}/cancel", headers=staff_headers)

    assert response.status_code == 200
    assert response.json()["canceledBy"] == "staff"


@pytest.mark.asyncio
async def test_manager_cancellation_is_attributed(client: AsyncClient, test_student, manager_headers, make_order):
    order = await make_order(test_student)

    response = await client.patch(f"/api/staff/orders/{order.id}/cancel", headers=manager_headers)

    assert response.status_code == 200
    assert response.json()["canceledBy"] == "manager"


@pytest.mark.asyncio
async def test_cannot_cancel_picked_order(client: AsyncClient, test_student, staff_headers, make_order):
    order = await make_order(test_student, OrderStatus.PICKED)

    response = await client.patch(f"/api/staff/orders/{order.id}/cancel", headers=staff_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot change order status from picked to cancelled"


@pytest.mark.asyncio
async def test_student_cannot_use_staff_cancel(client: AsyncClient, test_student, student_headers, make_order):
    order = await make_order(test_student)

    response = await client.patch(f"/api/staff/orders/{order.id}/cancel", headers=student_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_cancelled_orders_newest_cancellation_first(client: AsyncClient, test_student, staff_headers, make_order):
    now = datetime.utcnow()
    first = await make_order(test_student, OrderStatus.CANCELLED, created_at=now - timedelta(hours=3))
    second = await make_order(test_student, OrderStatus.CANCELLED, created_at=now - timedelta(hours=1))
    await make_order(test_student, OrderStatus.PENDING)

    response = await client.get("/api/staff/orders/cancelled", headers=staff_headers)

    assert response.status_code == 200
    assert [o["id"] for o in response.json()] == [str(second.id), str(first.id)]
