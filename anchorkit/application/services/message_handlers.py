"""
Transport message dispatcher.

Maps opaque ``{type, payload, requestId}`` requests onto record store
operations and wraps every outcome in a ``{success, data | error}``
envelope. Domain and validation errors become error envelopes; a stale
or repeated request gets a normal error response rather than raising.

Dependencies: pydantic, anchorkit.application.services.record_store
System role: Handler table for the request/response transport boundary
"""

import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from anchorkit.application.services.record_store import RecordStore
from anchorkit.core.exceptions import AnchorKitException, NotFoundError, ValidationError
from anchorkit.models.annotation import AnnotationStatus
from anchorkit.models.common import TransportRequest, TransportResponse
from anchorkit.observability.correlation import clear_correlation_id, set_correlation_id
from anchorkit.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)

MessageHandler = Callable[[dict[str, Any]], Awaitable[Any]]


def _require_id(payload: dict[str, Any]) -> str:
    record_id = payload.get("id")
    if not isinstance(record_id, str) or not record_id:
        raise ValidationError("Missing record id", field="id")
    return record_id


def _dump(value: Any) -> Any:
    return value.model_dump(mode="json", by_alias=True)


class MessageDispatcher:
    """
    One async handler per operation name.

    Attributes:
        store: Record store the handlers operate on
    """

    def __init__(self, store: RecordStore) -> None:
        """
        Initialize dispatcher with the default handler table.

        Args:
            store: Initialized record store
        """
        self.store = store
        self._handlers: dict[str, MessageHandler] = {
            "create": self._create,
            "get": self._get,
            "update": self._update,
            "delete": self._delete,
            "query": self._query,
            "stats": self._stats,
            "count": self._count,
            "clear": self._clear,
            "listForPage": self._list_for_page,
        }

    @property
    def message_types(self) -> list[str]:
        """Registered operation names."""
        return sorted(self._handlers)

    def register(self, message_type: str, handler: MessageHandler) -> None:
        """Add or replace the handler for ``message_type``."""
        self._handlers[message_type] = handler

    async def dispatch(self, request: TransportRequest | dict[str, Any]) -> TransportResponse:
        """
        Run the handler for a request.

        Args:
            request: Envelope or its camelCase dict form

        Returns:
            TransportResponse: Success with data, or failure with an error message
        """
        try:
            envelope = (
                request
                if isinstance(request, TransportRequest)
                else TransportRequest.model_validate(request)
            )
        except PydanticValidationError as e:
            return TransportResponse.fail(f"Invalid request: {e.errors()[0]['msg']}")

        request_id = set_correlation_id(envelope.request_id)
        try:
            handler = self._handlers.get(envelope.type)
            if handler is None:
                return TransportResponse.fail(f"Unknown message type: {envelope.type}", request_id)

            data = await handler(envelope.payload)
            return TransportResponse.ok(data, request_id)
        except AnchorKitException as e:
            log_with_context(
                logger,
                logging.WARNING,
                "Message failed",
                message_type=envelope.type,
                error_type=type(e).__name__,
                error_msg=e.message,
            )
            return TransportResponse.fail(e.message, request_id)
        except PydanticValidationError as e:
            return TransportResponse.fail(f"Invalid payload: {e.errors()[0]['msg']}", request_id)
        finally:
            clear_correlation_id()

    async def _create(self, payload: dict[str, Any]) -> Any:
        return _dump(await self.store.create(payload))

    async def _get(self, payload: dict[str, Any]) -> Any:
        record_id = _require_id(payload)
        record = await self.store.get(record_id)
        if record is None:
            raise NotFoundError(record_id)
        return _dump(record)

    async def _update(self, payload: dict[str, Any]) -> Any:
        record_id = _require_id(payload)
        changes = payload.get("changes", payload.get("patch"))
        if changes is None:
            changes = {key: value for key, value in payload.items() if key != "id"}
        return _dump(await self.store.update(record_id, changes))

    async def _delete(self, payload: dict[str, Any]) -> Any:
        record_id = _require_id(payload)
        await self.store.delete(record_id)
        return {"id": record_id, "deleted": True}

    async def _query(self, payload: dict[str, Any]) -> Any:
        return [_dump(record) for record in await self.store.query(payload)]

    async def _stats(self, payload: dict[str, Any]) -> Any:
        return _dump(await self.store.stats())

    async def _count(self, payload: dict[str, Any]) -> Any:
        return {"count": await self.store.count(payload)}

    async def _clear(self, payload: dict[str, Any]) -> Any:
        return {"removed": await self.store.clear()}

    async def _list_for_page(self, payload: dict[str, Any]) -> Any:
        url = payload.get("url")
        if not isinstance(url, str) or not url:
            raise ValidationError("Missing page url", field="url")
        records = await self.store.query(url=url, status=AnnotationStatus.ACTIVE)
        return [_dump(record) for record in records]
