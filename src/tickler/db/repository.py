"""Generic async repository: primary-key lookup and upsert."""

from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from tickler.db.session import Base

ModelT = TypeVar("ModelT", bound=Base)


class Repository(Generic[ModelT]):
    """Per-session repository for one model."""

    def __init__(self, model: type[ModelT], session: AsyncSession) -> None:
        self.model = model
        self.session = session

    async def get(self, id: str) -> ModelT | None:
        return await self.session.get(self.model, id)

    async def add(self, obj: ModelT) -> ModelT:
        merged = await self.session.merge(obj)
        await self.session.flush()
        return merged
