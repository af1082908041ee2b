"""Build order responses with owner details resolved in one query"""

from typing import Dict, Iterable, List, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_dining.models.user import User
from campus_dining.schemas.order import OrderOwner, OrderResponse

ResponseT = TypeVar("ResponseT")


async def load_owners(db: AsyncSession, user_ids: Iterable[UUID]) -> Dict[UUID, User]:
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


async def present_many(db: AsyncSession, records: List, schema: Type[ResponseT] = OrderResponse) -> List[ResponseT]:
    """Serialize orders (live or archived); a deleted owner yields user=None"""
    owners = await load_owners(db, (record.user_id for record in records))
    responses = []
    for record in records:
        response = schema.model_validate(record)
        owner = owners.get(record.user_id)
        response.user = OrderOwner.model_validate(owner) if owner else None
        responses.append(response)
    return responses


async def present(db: AsyncSession, record, schema: Type[ResponseT] = OrderResponse) -> ResponseT:
    return (await present_many(db, [record], schema))[0]
