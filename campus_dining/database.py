"""Async database engine, session factory and declarative base"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from campus_dining.config import settings


Base = declarative_base()

engine = create_async_engine(settings.database_url, echo=settings.database_echo, future=True)

SessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def enum_values(enum_cls):
    """Persist enum values ("pending") rather than member names ("PENDING")"""
    return [member.value for member in enum_cls]


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a database session"""
    async with SessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create all tables (development and seeding only; use Alembic otherwise)"""
    # Import models so they register on the metadata
    import campus_dining.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
