"""Test configuration and fixtures"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from campus_dining.main import app
from campus_dining.database import Base, get_db
from campus_dining.models.menu import MenuItem
from campus_dining.models.order import Order, OrderStatus
from campus_dining.models.user import User, UserRole
from campus_dining.security import create_access_token, get_password_hash
from campus_dining.services.lifecycle import generate_order_id


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

DEFAULT_ITEMS = [
    {"name": "Burger", "quantity": 1, "price": 5.99},
    {"name": "Soda", "quantity": 2, "price": 1.50},
]


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def make_user(test_db):
    """Factory creating users directly in the database"""
    async def _make(username: str, role: UserRole = UserRole.STUDENT, password: str = "password123", **extra):
        user = User(
            id=uuid4(),
            username=username,
            email=extra.pop("email", f"{username}@campus.edu"),
            hashed_password=get_password_hash(password),
            role=role,
            is_active=True,
            **extra,
        )
        test_db.add(user)
        await test_db.commit()
        return user
    return _make


@pytest.fixture
async def test_student(make_user):
    return await make_user("alice", UserRole.STUDENT, first_name="Alice", last_name="Nguyen")


@pytest.fixture
async def other_student(make_user):
    return await make_user("bob", UserRole.STUDENT)


@pytest.fixture
async def test_staff(make_user):
    return await make_user("kitchen", UserRole.STAFF, email="kitchen@system.com")


@pytest.fixture
async def test_manager(make_user):
    return await make_user("boss", UserRole.MANAGER, email="boss@system.com")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def student_headers(test_student):
    return auth_headers(test_student)


@pytest.fixture
def other_student_headers(other_student):
    return auth_headers(other_student)


@pytest.fixture
def staff_headers(test_staff):
    return auth_headers(test_staff)


@pytest.fixture
def manager_headers(test_manager):
    return auth_headers(test_manager)


@pytest.fixture
def make_order(test_db):
    """Factory inserting an order in any state, bypassing the API"""
    async def _make(owner: User, status: OrderStatus = OrderStatus.PENDING, items=None, created_at=None):
        created_at = created_at or datetime.utcnow()
        cancelled = status == OrderStatus.CANCELLED
        order = Order(
            order_id=generate_order_id(created_at),
            user_id=owner.id,
            items=items if items is not None else [dict(item) for item in DEFAULT_ITEMS],
            pickup_time="12:30",
            special_instructions="",
            status=status,
            cancelled_at=created_at if cancelled else None,
            canceled_by=owner.role if cancelled else None,
            created_at=created_at,
        )
        test_db.add(order)
        await test_db.commit()
        return order
    return _make


@pytest.fixture
async def test_menu_items(test_db):
    """Create test menu items"""
    items = [
        MenuItem(name="Burger", category="Mains", price=5.99, description="Beef burger", image="/uploads/burger.jpg"),
        MenuItem(name="Veggie Wrap", category="Mains", price=4.99, image="/uploads/wrap.jpg"),
        MenuItem(name="Soda", category="Drinks", price=1.50, image="/uploads/soda.jpg"),
        MenuItem(name="Seasonal Pie", category="Desserts", price=3.25, available=False, image=""),
    ]

    for item in items:
        test_db.add(item)

    await test_db.commit()
    return items


@pytest.fixture
async def client(test_db):
    """Create test client with overridden database"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
