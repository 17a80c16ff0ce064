"""
Annotation CRUD operations.

Provides Create, Read, Update, Delete operations for AnnotationModel
with filtered, ordered and paginated search plus per-status counts.

Dependencies: sqlalchemy, anchorkit.boundary.db.models
System role: Annotation persistence operations
"""

from typing import Sequence

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from anchorkit.boundary.db.models.annotation_model import AnnotationModel
from anchorkit.boundary.db.CRUD.base_crud import BaseCRUD
from anchorkit.models.annotation import AnnotationStatus


class AnnotationCRUD(BaseCRUD[AnnotationModel]):
    """
    CRUD operations for AnnotationModel.

    Extends BaseCRUD with filtered search. Filters map onto the indexed
    url/domain/status columns; ordering and pagination are applied by the
    database after filtering.
    """

    def __init__(self) -> None:
        """Initialize AnnotationCRUD with AnnotationModel."""
        super().__init__(AnnotationModel)

    def _filtered(
        self,
        stmt: Select,
        url: str | None = None,
        domain: str | None = None,
        status: AnnotationStatus | None = None,
        text_contains: str | None = None,
    ) -> Select:
        if url is not None:
            stmt = stmt.where(AnnotationModel.url == url)
        if domain is not None:
            stmt = stmt.where(AnnotationModel.domain == domain)
        if status is not None:
            stmt = stmt.where(AnnotationModel.status == status)
        if text_contains:
            needle = text_contains.lower()
            stmt = stmt.where(
                or_(
                    func.lower(AnnotationModel.original_text).contains(needle, autoescape=True),
                    func.lower(AnnotationModel.summary).contains(needle, autoescape=True),
                    func.lower(AnnotationModel.user_comment).contains(needle, autoescape=True),
                )
            )
        return stmt

    async def search(
        self,
        session: AsyncSession,
        url: str | None = None,
        domain: str | None = None,
        status: AnnotationStatus | None = None,
        text_contains: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[AnnotationModel]:
        """
        Retrieve annotations matching every given criterion.

        Args:
            session: Async database session
            url: Exact page URL
            domain: Exact host name
            status: Lifecycle status
            text_contains: Case-insensitive substring of text, summary or comment
            limit: Maximum number of annotations to return
            offset: Number of annotations to skip

        Returns:
            Sequence of AnnotationModels, newest first
        """
        stmt = self._filtered(select(AnnotationModel), url, domain, status, text_contains)
        stmt = stmt.order_by(AnnotationModel.timestamp.desc(), AnnotationModel.id.desc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count(
        self,
        session: AsyncSession,
        url: str | None = None,
        domain: str | None = None,
        status: AnnotationStatus | None = None,
        text_contains: str | None = None,
    ) -> int:
        """
        Count annotations matching every given criterion.

        Args:
            session: Async database session
            url: Exact page URL
            domain: Exact host name
            status: Lifecycle status
            text_contains: Case-insensitive substring of text, summary or comment

        Returns:
            Number of matching rows
        """
        stmt = self._filtered(
            select(func.count()).select_from(AnnotationModel),
            url,
            domain,
            status,
            text_contains,
        )
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def count_by_status(self, session: AsyncSession) -> dict[AnnotationStatus, int]:
        """
        Count annotations grouped by status.

        Args:
            session: Async database session

        Returns:
            Mapping of status to row count (statuses with no rows omitted)
        """
        stmt = select(AnnotationModel.status, func.count()).group_by(AnnotationModel.status)
        result = await session.execute(stmt)
        return {AnnotationStatus(status): int(total) for status, total in result.all()}

    async def get_latest_by_text_hash(
        self,
        session: AsyncSession,
        url: str,
        text_hash: str,
        status: AnnotationStatus | None = AnnotationStatus.ACTIVE,
    ) -> AnnotationModel | None:
        """
        Retrieve the newest annotation on a page whose text hashes to ``text_hash``.

        Args:
            session: Async database session
            url: Exact page URL
            text_hash: MD5 of the selected text
            status: Restrict to this status (None for any)

        Returns:
            Newest matching AnnotationModel, None if none
        """
        stmt = select(AnnotationModel).where(
            AnnotationModel.url == url,
            AnnotationModel.text_hash == text_hash,
        )
        if status is not None:
            stmt = stmt.where(AnnotationModel.status == status)
        stmt = stmt.order_by(AnnotationModel.timestamp.desc()).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_all(self, session: AsyncSession) -> int:
        """
        Delete every annotation.

        Args:
            session: Async database session

        Returns:
            Number of rows removed
        """
        result = await session.execute(delete(AnnotationModel))
        return result.rowcount or 0


annotation_crud = AnnotationCRUD()
