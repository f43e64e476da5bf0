"""Generic repository base.

Repositories only flush. Committing is left to the caller, which wraps
related writes in ``policyhub.db.config.atomic`` so they succeed or fail
together.
"""

from collections.abc import Sequence
from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)
PKType = TypeVar("PKType", bound=int | str)


class BaseRepository(Generic[ModelType, PKType]):
    """Primary-key access and inserts for one model.

    Subclasses declare the model through the generic parameter:

        class PortalRepository(BaseRepository[Portal, int]):
            ...
    """

    model: type[ModelType]

    def __init__(self, db: AsyncSession):
        self.db = db

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", ()):
            model = next(iter(getattr(base, "__args__", ())), None)
            if isinstance(model, type) and issubclass(model, Base):
                cls.model = model
                return

    async def get(self, pk: PKType) -> ModelType | None:
        return await self.db.get(self.model, pk)

    async def add(self, obj: ModelType) -> ModelType:
        """Stage a row and flush so server-generated keys are populated."""
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def add_many(self, objs: Sequence[ModelType]) -> list[ModelType]:
        self.db.add_all(objs)
        await self.db.flush()
        return list(objs)
