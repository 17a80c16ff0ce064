"""
Unit tests for BaseCRUD over the annotations table.

A mocked AsyncSession stands in for the database; statements are
inspected by compiling them against the AnnotationModel table.

System role: Verification of the shared row operations
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from anchorkit.boundary.db.CRUD.base_crud import BaseCRUD
from anchorkit.boundary.db.models.annotation_model import AnnotationModel

RECORD_ID = "ann_0123456789abcdef0123456789abcdef"


@pytest.fixture
def crud() -> BaseCRUD:
    return BaseCRUD(AnnotationModel)


@pytest.fixture
def session() -> AsyncMock:
    """AsyncSession double; execute() results are set per test."""
    return AsyncMock(spec=AsyncSession)


def _returning(session: AsyncMock, *, scalar: Any = None, rowcount: int = 0, rows: list | None = None) -> None:
    result = MagicMock()
    result.scalar_one_or_none = MagicMock(return_value=scalar)
    result.rowcount = rowcount
    result.scalars.return_value.all.return_value = rows or []
    session.execute = AsyncMock(return_value=result)


def _sql(session: AsyncMock) -> str:
    stmt = session.execute.call_args.args[0]
    return str(stmt.compile(compile_kwargs={"literal_binds": True}))


class TestRowLifecycle:
    """Insert, load and update a single annotation row."""

    @pytest.mark.asyncio
    async def test_create_should_flush_then_refresh_new_row(self, crud: BaseCRUD, session: AsyncMock) -> None:
        # Arrange
        calls: list[str] = []
        session.flush = AsyncMock(side_effect=lambda: calls.append("flush"))
        session.refresh = AsyncMock(side_effect=lambda row: calls.append("refresh"))

        # Act
        row = await crud.create(session, id=RECORD_ID, url="https://example.com/", original_text="brown fox")

        # Assert
        session.add.assert_called_once_with(row)
        assert isinstance(row, AnnotationModel)
        assert row.id == RECORD_ID
        assert calls == ["flush", "refresh"]

    @pytest.mark.asyncio
    async def test_get_by_id_should_filter_on_record_id(self, crud: BaseCRUD, session: AsyncMock) -> None:
        row = MagicMock(id=RECORD_ID)
        _returning(session, scalar=row)

        assert await crud.get_by_id(session, RECORD_ID) is row
        assert f"annotations.id = '{RECORD_ID}'" in _sql(session)

    @pytest.mark.asyncio
    async def test_update_by_id_should_assign_columns(self, crud: BaseCRUD, session: AsyncMock) -> None:
        # Arrange
        row = MagicMock()
        _returning(session, scalar=row)

        # Act
        updated = await crud.update_by_id(session, RECORD_ID, color="#90caf9", user_comment="check source")

        # Assert
        assert updated is row
        assert (row.color, row.user_comment) == ("#90caf9", "check source")
        session.refresh.assert_awaited_once_with(row)

    @pytest.mark.asyncio
    async def test_update_by_id_should_skip_flush_for_unknown_id(self, crud: BaseCRUD, session: AsyncMock) -> None:
        _returning(session, scalar=None)

        assert await crud.update_by_id(session, RECORD_ID, color="#90caf9") is None
        session.flush.assert_not_awaited()


class TestRowQueries:
    """Delete, existence and full-table reads."""

    @pytest.mark.parametrize(("rowcount", "expected"), [(1, True), (0, False)])
    @pytest.mark.asyncio
    async def test_delete_by_id_should_report_rowcount(
        self, crud: BaseCRUD, session: AsyncMock, rowcount: int, expected: bool
    ) -> None:
        _returning(session, rowcount=rowcount)

        assert await crud.delete_by_id(session, RECORD_ID) is expected
        assert _sql(session).startswith("DELETE FROM annotations")

    @pytest.mark.parametrize(("scalar", "expected"), [(RECORD_ID, True), (None, False)])
    @pytest.mark.asyncio
    async def test_exists_should_check_id_column_only(
        self, crud: BaseCRUD, session: AsyncMock, scalar: Any, expected: bool
    ) -> None:
        _returning(session, scalar=scalar)

        assert await crud.exists(session, RECORD_ID) is expected
        assert _sql(session).split("FROM")[0].strip() == "SELECT annotations.id"

    @pytest.mark.asyncio
    async def test_get_all_should_return_every_row(self, crud: BaseCRUD, session: AsyncMock) -> None:
        rows = [MagicMock(), MagicMock()]
        _returning(session, rows=rows)

        assert await crud.get_all(session) == rows
        assert "LIMIT" not in _sql(session)
