"""
Integration tests for RecordStore against a real aiosqlite database.

Covers round trips, hash integrity, status lifecycle, filtered and
paginated queries, statistics and initialization failures.

System role: Verification of durable annotation persistence
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from anchorkit.application.services.record_store import RecordStore
from anchorkit.boundary.db.models.annotation_model import AnnotationModel
from anchorkit.configs import DatabaseSettings
from anchorkit.core.exceptions import (
    ConflictError,
    InitializationError,
    InvalidStatusTransitionError,
    NotFoundError,
    StoreNotInitializedError,
    ValidationError,
)
from anchorkit.core.text_hasher import hash_text
from anchorkit.models.annotation import (
    AnnotationCreate,
    AnnotationFilter,
    AnnotationKind,
    AnnotationPatch,
    AnnotationStatus,
)

PAGE = "https://example.com/articles/reanchoring"
OTHER_PAGE = "https://other.org/post"


@pytest.fixture
async def twenty_five(store: RecordStore, create_payload) -> list[str]:
    """Create 25 records one minute apart; returns ids newest first."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ids = []
    for n in range(25):
        record = await store.create(
            create_payload(
                text=f"record number {n}",
                id=f"ann_{n:02d}",
                timestamp=(start + timedelta(minutes=n)).isoformat(),
            )
        )
        ids.append(record.id)
    return list(reversed(ids))


class TestCreateAndGet:
    """Test suite for create() and get()."""

    @pytest.mark.asyncio
    async def test_create_should_round_trip(self, store: RecordStore, create_payload) -> None:
        created = await store.create(create_payload())

        fetched = await store.get(created.id)

        assert fetched == created
        assert created.id.startswith("ann_")
        assert created.domain == "example.com"
        assert created.text_hash == hash_text("quick brown fox")
        assert created.context.after == "jumps over"
        assert created.metadata.page_title == "Sample Article"
        assert created.timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_create_should_ignore_client_text_hash(self, store: RecordStore, create_payload) -> None:
        created = await store.create(create_payload(textHash="0" * 32))

        assert created.text_hash == hash_text("quick brown fox")

    @pytest.mark.asyncio
    async def test_create_should_accept_model_input(self, store: RecordStore) -> None:
        created = await store.create(
            AnnotationCreate(url=PAGE, original_text="note text", kind=AnnotationKind.NOTE, summary="s")
        )

        assert created.kind is AnnotationKind.NOTE
        assert created.status is AnnotationStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_create_with_existing_id_should_conflict(self, store: RecordStore, create_payload) -> None:
        await store.create(create_payload(id="ann_fixed"))

        with pytest.raises(ConflictError) as exc_info:
            await store.create(create_payload(id="ann_fixed"))

        assert exc_info.value.record_id == "ann_fixed"

    @pytest.mark.asyncio
    async def test_create_without_url_should_fail_validation(self, store: RecordStore) -> None:
        with pytest.raises(ValidationError):
            await store.create({"originalText": "orphan"})

    @pytest.mark.asyncio
    async def test_get_missing_should_return_none(self, store: RecordStore) -> None:
        assert await store.get("ann_missing") is None


class TestUpdate:
    """Test suite for update()."""

    @pytest.mark.asyncio
    async def test_update_should_be_visible_to_next_get(self, store: RecordStore, create_payload) -> None:
        created = await store.create(create_payload())

        updated = await store.update(created.id, {"userComment": "remember", "color": "#ff0000"})

        assert updated.user_comment == "remember"
        assert updated.color == "#ff0000"
        assert updated.last_modified >= created.last_modified
        assert await store.get(created.id) == updated

    @pytest.mark.asyncio
    async def test_update_original_text_should_recompute_hash(self, store: RecordStore, create_payload) -> None:
        created = await store.create(create_payload())

        updated = await store.update(created.id, AnnotationPatch(original_text="lazy dog"))

        assert updated.text_hash == hash_text("lazy dog")

    @pytest.mark.asyncio
    async def test_update_nested_field_should_replace_whole_value(
        self, store: RecordStore, create_payload
    ) -> None:
        created = await store.create(create_payload())

        updated = await store.update(created.id, {"context": {"before": "only before"}})

        assert updated.context.before == "only before"
        assert updated.context.after == ""

    @pytest.mark.asyncio
    async def test_update_should_allow_clearing_color(self, store: RecordStore, create_payload) -> None:
        created = await store.create(create_payload())

        updated = await store.update(created.id, {"color": None})

        assert updated.color is None

    @pytest.mark.asyncio
    async def test_update_null_text_fields_should_empty_them(self, store: RecordStore, create_payload) -> None:
        created = await store.create(
            create_payload(summary="Fox summary", userComment="Remember this")
        )

        updated = await store.update(
            created.id, {"summary": None, "userComment": None, "selector": None}
        )

        assert updated.summary == ""
        assert updated.user_comment == ""
        assert updated.selector == ""
        assert await store.get(created.id) == updated

    @pytest.mark.parametrize("field", ["originalText", "status", "kind", "context", "metadata", "position"])
    @pytest.mark.asyncio
    async def test_update_null_required_field_should_fail(
        self, store: RecordStore, create_payload, field: str
    ) -> None:
        created = await store.create(create_payload())

        with pytest.raises(ValidationError, match="cannot be null"):
            await store.update(created.id, {field: None})

        assert await store.get(created.id) == created

    @pytest.mark.parametrize("field", ["id", "textHash", "timestamp", "unknownField"])
    @pytest.mark.asyncio
    async def test_update_immutable_or_unknown_field_should_fail(
        self, store: RecordStore, create_payload, field: str
    ) -> None:
        created = await store.create(create_payload())

        with pytest.raises(ValidationError):
            await store.update(created.id, {field: "x"})

    @pytest.mark.asyncio
    async def test_update_missing_record_should_raise(self, store: RecordStore) -> None:
        with pytest.raises(NotFoundError):
            await store.update("ann_missing", {"summary": "x"})

    @pytest.mark.asyncio
    async def test_status_should_move_between_active_and_archived(
        self, store: RecordStore, create_payload
    ) -> None:
        created = await store.create(create_payload())

        archived = await store.update(created.id, {"status": "archived"})
        restored = await store.update(created.id, {"status": "active"})

        assert archived.status is AnnotationStatus.ARCHIVED
        assert restored.status is AnnotationStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_deleted_status_should_be_terminal(self, store: RecordStore, create_payload) -> None:
        created = await store.create(create_payload())
        await store.update(created.id, {"status": "deleted"})

        with pytest.raises(InvalidStatusTransitionError):
            await store.update(created.id, {"status": "active"})

        same = await store.update(created.id, {"status": "deleted"})
        assert same.status is AnnotationStatus.DELETED


class TestDelete:
    """Test suite for delete()."""

    @pytest.mark.asyncio
    async def test_second_delete_should_raise_not_found(self, store: RecordStore, create_payload) -> None:
        created = await store.create(create_payload())

        await store.delete(created.id)

        with pytest.raises(NotFoundError):
            await store.delete(created.id)
        assert await store.get(created.id) is None


class TestQuery:
    """Test suite for query(), count() and the page helpers."""

    @pytest.mark.asyncio
    async def test_query_should_page_by_descending_timestamp(
        self, store: RecordStore, twenty_five: list[str]
    ) -> None:
        first_page = [r.id for r in await store.query(AnnotationFilter(limit=10, offset=0))]
        second_page = [r.id for r in await store.query(limit=10, offset=10)]

        assert first_page == twenty_five[:10]
        assert second_page == twenty_five[10:20]
        assert not set(first_page) & set(second_page)

    @pytest.mark.asyncio
    async def test_query_should_return_single_pass_iterator(
        self, store: RecordStore, twenty_five: list[str]
    ) -> None:
        results = await store.query(limit=3)

        assert len(list(results)) == 3
        assert list(results) == []

    @pytest.mark.asyncio
    async def test_query_should_break_timestamp_ties_by_id(self, store: RecordStore, create_payload) -> None:
        moment = "2024-05-01T12:00:00+00:00"
        for record_id in ("ann_a", "ann_c", "ann_b"):
            await store.create(create_payload(id=record_id, timestamp=moment))

        assert [r.id for r in await store.query()] == ["ann_c", "ann_b", "ann_a"]

    @pytest.mark.asyncio
    async def test_query_should_filter_before_paginating(self, store: RecordStore, create_payload) -> None:
        for n in range(6):
            url = PAGE if n % 2 == 0 else OTHER_PAGE
            await store.create(create_payload(text=f"item {n}", url=url))

        page_only = list(await store.query(url=PAGE, limit=2, offset=1))

        assert len(page_only) == 2
        assert all(record.url == PAGE for record in page_only)
        assert await store.count(url=PAGE, limit=1) == 3

    @pytest.mark.asyncio
    async def test_query_should_filter_by_domain_and_status(self, store: RecordStore, create_payload) -> None:
        kept = await store.create(create_payload(url=OTHER_PAGE))
        archived = await store.create(create_payload(url=OTHER_PAGE))
        await store.update(archived.id, {"status": "archived"})
        await store.create(create_payload())

        results = list(await store.query({"domain": "other.org", "status": "active"}))

        assert [r.id for r in results] == [kept.id]

    @pytest.mark.asyncio
    async def test_text_contains_should_search_text_summary_and_comment(
        self, store: RecordStore, create_payload
    ) -> None:
        by_text = await store.create(create_payload(text="The Quick Brown Fox"))
        by_summary = await store.create(create_payload(text="unrelated", summary="about a FOX"))
        by_comment = await store.create(create_payload(text="other", userComment="foxes everywhere"))
        await store.create(create_payload(text="nothing here"))

        results = {r.id for r in await store.query(textContains="fox")}

        assert results == {by_text.id, by_summary.id, by_comment.id}

    @pytest.mark.asyncio
    async def test_text_contains_should_treat_wildcards_literally(
        self, store: RecordStore, create_payload
    ) -> None:
        await store.create(create_payload(text="100% sure"))
        await store.create(create_payload(text="100 percent"))

        assert await store.count(text_contains="100%") == 1

    @pytest.mark.asyncio
    async def test_list_for_page_should_return_active_records(self, store: RecordStore, create_payload) -> None:
        active = await store.create(create_payload())
        archived = await store.create(create_payload())
        await store.update(archived.id, {"status": "archived"})
        await store.create(create_payload(url=OTHER_PAGE))

        assert [r.id for r in await store.list_for_page(PAGE)] == [active.id]

    @pytest.mark.asyncio
    async def test_find_by_text_hash_should_return_active_match(
        self, store: RecordStore, create_payload
    ) -> None:
        created = await store.create(create_payload(text="lazy dog"))

        found = await store.find_by_text_hash(PAGE, hash_text("lazy dog"))

        assert found.id == created.id
        assert await store.find_by_text_hash(OTHER_PAGE, hash_text("lazy dog")) is None


class TestMaintenance:
    """Test suite for stats(), clear() and verify_integrity()."""

    @pytest.mark.asyncio
    async def test_stats_should_count_each_status(self, store: RecordStore, create_payload) -> None:
        ids = [(await store.create(create_payload())).id for _ in range(4)]
        await store.update(ids[0], {"status": "archived"})
        await store.update(ids[1], {"status": "deleted"})

        stats = await store.stats()

        assert (stats.total, stats.active, stats.archived, stats.deleted) == (4, 2, 1, 1)

    @pytest.mark.asyncio
    async def test_clear_should_remove_everything(self, store: RecordStore, create_payload) -> None:
        for _ in range(3):
            await store.create(create_payload())

        assert await store.clear() == 3
        assert (await store.stats()).total == 0

    @pytest.mark.asyncio
    async def test_verify_integrity_should_report_corrupted_hashes(
        self, store: RecordStore, create_payload
    ) -> None:
        good = await store.create(create_payload())
        bad = await store.create(create_payload())
        async with store._session_factory() as session, session.begin():
            await session.execute(
                update(AnnotationModel).where(AnnotationModel.id == bad.id).values(text_hash="0" * 32)
            )

        assert await store.verify_integrity() == [bad.id]
        assert good.id not in await store.verify_integrity()


class TestLifecycle:
    """Test suite for initialization and shutdown."""

    @pytest.mark.asyncio
    async def test_calls_before_initialize_should_fail_fast(self, db_settings: DatabaseSettings) -> None:
        store = RecordStore(db_settings)

        with pytest.raises(StoreNotInitializedError) as exc_info:
            await store.get("ann_any")

        assert isinstance(exc_info.value, InitializationError)
        assert exc_info.value.details["operation"] == "get"

    @pytest.mark.asyncio
    async def test_initialize_should_be_idempotent(self, store: RecordStore, create_payload) -> None:
        created = await store.create(create_payload())

        await store.initialize()

        assert await store.get(created.id) is not None

    @pytest.mark.asyncio
    async def test_initialize_failure_should_raise_initialization_error(self, tmp_path) -> None:
        unreachable = tmp_path / "missing_dir" / "nested" / "store.db"
        store = RecordStore(DatabaseSettings(url=f"sqlite+aiosqlite:///{unreachable}"))

        with pytest.raises(InitializationError):
            await store.initialize()

        assert store.initialized is False

    @pytest.mark.asyncio
    async def test_data_should_survive_reopen(self, db_settings: DatabaseSettings, create_payload) -> None:
        first = RecordStore(db_settings)
        await first.initialize()
        created = await first.create(create_payload())
        await first.close()

        second = RecordStore(db_settings)
        await second.initialize()

        assert await second.get(created.id) == created
        await second.close()

    @pytest.mark.asyncio
    async def test_memory_store_should_share_schema_across_sessions(
        self, memory_store: RecordStore, create_payload
    ) -> None:
        created = await memory_store.create(create_payload())

        assert await memory_store.ping() is True
        assert await memory_store.get(created.id) == created
