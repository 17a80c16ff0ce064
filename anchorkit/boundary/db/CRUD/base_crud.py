"""
Generic CRUD over string-keyed record tables.

Every method runs inside a transaction the caller opened; nothing here
commits, it only flushes so ids, defaults and rowcounts are visible.

Dependencies: sqlalchemy
System role: Shared row operations under AnnotationCRUD
"""

from typing import Generic, TypeVar, Sequence

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from anchorkit.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Row operations keyed by the ``id`` column.

    Attributes:
        model: Mapped class the operations target
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **values) -> ModelT:
        """
        Insert a row and return it with database defaults loaded.

        Args:
            session: Session inside an open transaction
            **values: Column values, including the caller-generated id

        Returns:
            ModelT: The flushed and refreshed instance
        """
        row = self.model(**values)
        session.add(row)
        await session.flush()
        await session.refresh(row)
        return row

    async def get_by_id(self, session: AsyncSession, record_id: str) -> ModelT | None:
        """Row with ``record_id``, or None."""
        result = await session.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_all(self, session: AsyncSession) -> Sequence[ModelT]:
        """Every row, unordered. Used for full-table integrity scans."""
        result = await session.execute(select(self.model))
        return result.scalars().all()

    async def update_by_id(self, session: AsyncSession, record_id: str, **changes) -> ModelT | None:
        """
        Assign ``changes`` to the loaded row, flush and refresh it.

        Returns:
            ModelT | None: Updated row, None when ``record_id`` is unknown
        """
        row = await self.get_by_id(session, record_id)
        if row is None:
            return None
        for column, value in changes.items():
            setattr(row, column, value)
        await session.flush()
        await session.refresh(row)
        return row

    async def delete_by_id(self, session: AsyncSession, record_id: str) -> bool:
        """Delete the row; False when nothing matched."""
        result = await session.execute(delete(self.model).where(self.model.id == record_id))
        return result.rowcount > 0

    async def exists(self, session: AsyncSession, record_id: str) -> bool:
        result = await session.execute(select(self.model.id).where(self.model.id == record_id))
        return result.scalar_one_or_none() is not None
