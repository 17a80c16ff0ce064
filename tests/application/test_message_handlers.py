"""
Test suite for MessageDispatcher.

Tests each registered operation, error envelopes for domain and
validation failures, and request id echoing.

System role: Verification of the transport handler table
"""

import pytest

from anchorkit.application.services.message_handlers import MessageDispatcher
from anchorkit.application.services.record_store import RecordStore
from anchorkit.models.common import TransportRequest
from anchorkit.observability.correlation import get_correlation_id

PAGE = "https://example.com/articles/reanchoring"


@pytest.fixture
def dispatcher(memory_store: RecordStore) -> MessageDispatcher:
    """Dispatcher over an in-memory store."""
    return MessageDispatcher(memory_store)


async def _create(dispatcher: MessageDispatcher, create_payload, **overrides) -> dict:
    response = await dispatcher.dispatch({"type": "create", "payload": create_payload(**overrides)})
    assert response.success is True
    return response.data


class TestDispatch:
    """Test suite for envelope handling."""

    @pytest.mark.asyncio
    async def test_all_operations_should_be_registered(self, dispatcher: MessageDispatcher) -> None:
        assert dispatcher.message_types == sorted(
            ["create", "get", "update", "delete", "query", "stats", "count", "clear", "listForPage"]
        )

    @pytest.mark.asyncio
    async def test_request_id_should_be_echoed(self, dispatcher: MessageDispatcher) -> None:
        response = await dispatcher.dispatch(TransportRequest(type="stats", request_id="req-42"))

        assert response.request_id == "req-42"
        assert get_correlation_id() == ""

    @pytest.mark.asyncio
    async def test_missing_request_id_should_be_generated(self, dispatcher: MessageDispatcher) -> None:
        response = await dispatcher.dispatch({"type": "stats"})

        assert response.request_id

    @pytest.mark.asyncio
    async def test_unknown_type_should_fail(self, dispatcher: MessageDispatcher) -> None:
        response = await dispatcher.dispatch({"type": "explode", "requestId": "r1"})

        assert response.success is False
        assert "Unknown message type" in response.error
        assert response.request_id == "r1"

    @pytest.mark.asyncio
    async def test_malformed_envelope_should_fail(self, dispatcher: MessageDispatcher) -> None:
        response = await dispatcher.dispatch({"type": "", "payload": {}})

        assert response.success is False
        assert response.error.startswith("Invalid request")


class TestOperations:
    """Test suite for the registered handlers."""

    @pytest.mark.asyncio
    async def test_create_should_return_camel_case_record(
        self, dispatcher: MessageDispatcher, create_payload
    ) -> None:
        data = await _create(dispatcher, create_payload)

        assert data["originalText"] == "quick brown fox"
        assert len(data["textHash"]) == 32
        assert data["metadata"]["pageTitle"] == "Sample Article"
        assert data["status"] == "active"

    @pytest.mark.asyncio
    async def test_create_with_invalid_payload_should_fail(self, dispatcher: MessageDispatcher) -> None:
        response = await dispatcher.dispatch({"type": "create", "payload": {"originalText": "x"}})

        assert response.success is False
        assert "create" in response.error

    @pytest.mark.asyncio
    async def test_get_should_return_record_or_not_found(
        self, dispatcher: MessageDispatcher, create_payload
    ) -> None:
        data = await _create(dispatcher, create_payload)

        found = await dispatcher.dispatch({"type": "get", "payload": {"id": data["id"]}})
        missing = await dispatcher.dispatch({"type": "get", "payload": {"id": "ann_missing"}})

        assert found.data == data
        assert missing.success is False
        assert missing.error == "Annotation not found: ann_missing"

    @pytest.mark.asyncio
    async def test_get_without_id_should_fail(self, dispatcher: MessageDispatcher) -> None:
        response = await dispatcher.dispatch({"type": "get", "payload": {}})

        assert response.success is False
        assert response.error == "Missing record id"

    @pytest.mark.asyncio
    async def test_update_should_accept_changes_or_inline_fields(
        self, dispatcher: MessageDispatcher, create_payload
    ) -> None:
        data = await _create(dispatcher, create_payload)

        nested = await dispatcher.dispatch(
            {"type": "update", "payload": {"id": data["id"], "changes": {"userComment": "first"}}}
        )
        inline = await dispatcher.dispatch(
            {"type": "update", "payload": {"id": data["id"], "summary": "second"}}
        )

        assert nested.data["userComment"] == "first"
        assert inline.data["summary"] == "second"
        assert inline.data["userComment"] == "first"

    @pytest.mark.asyncio
    async def test_illegal_transition_should_fail(
        self, dispatcher: MessageDispatcher, create_payload
    ) -> None:
        data = await _create(dispatcher, create_payload)
        await dispatcher.dispatch({"type": "update", "payload": {"id": data["id"], "status": "deleted"}})

        response = await dispatcher.dispatch(
            {"type": "update", "payload": {"id": data["id"], "status": "active"}}
        )

        assert response.success is False
        assert "Cannot change status" in response.error

    @pytest.mark.asyncio
    async def test_repeated_delete_should_return_error_envelope(
        self, dispatcher: MessageDispatcher, create_payload
    ) -> None:
        data = await _create(dispatcher, create_payload)
        request = {"type": "delete", "payload": {"id": data["id"]}}

        first = await dispatcher.dispatch(request)
        second = await dispatcher.dispatch(request)

        assert first.data == {"id": data["id"], "deleted": True}
        assert second.success is False
        assert "not found" in second.error

    @pytest.mark.asyncio
    async def test_query_count_and_stats_should_agree(
        self, dispatcher: MessageDispatcher, create_payload
    ) -> None:
        for n in range(3):
            await _create(dispatcher, create_payload, text=f"fox number {n}")
        await _create(dispatcher, create_payload, text="unrelated", url="https://other.org/")

        query = await dispatcher.dispatch(
            {"type": "query", "payload": {"url": PAGE, "limit": 2}}
        )
        count = await dispatcher.dispatch({"type": "count", "payload": {"textContains": "fox"}})
        stats = await dispatcher.dispatch({"type": "stats"})

        assert len(query.data) == 2
        assert count.data == {"count": 3}
        assert stats.data == {"total": 4, "active": 4, "archived": 0, "deleted": 0}

    @pytest.mark.asyncio
    async def test_list_for_page_should_return_active_only(
        self, dispatcher: MessageDispatcher, create_payload
    ) -> None:
        active = await _create(dispatcher, create_payload)
        archived = await _create(dispatcher, create_payload)
        await dispatcher.dispatch({"type": "update", "payload": {"id": archived["id"], "status": "archived"}})

        response = await dispatcher.dispatch({"type": "listForPage", "payload": {"url": PAGE}})
        missing_url = await dispatcher.dispatch({"type": "listForPage", "payload": {}})

        assert [r["id"] for r in response.data] == [active["id"]]
        assert missing_url.success is False

    @pytest.mark.asyncio
    async def test_clear_should_report_removed_count(
        self, dispatcher: MessageDispatcher, create_payload
    ) -> None:
        await _create(dispatcher, create_payload)
        await _create(dispatcher, create_payload)

        response = await dispatcher.dispatch({"type": "clear"})

        assert response.data == {"removed": 2}
