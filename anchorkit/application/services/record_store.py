"""
Record store service.

Durable, indexed CRUD over annotation records. Owns the async engine and
runs every operation in its own transaction; writes are additionally
serialized per store instance so no two patches interleave.

Dependencies: sqlalchemy, anchorkit.boundary.db, anchorkit.models
System role: Single owner of persisted annotation state
"""

import asyncio
import logging
from typing import Any, Iterator
from urllib.parse import urlparse

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from anchorkit.boundary.db import Base, get_async_engine, get_async_session_factory, utc_now
from anchorkit.boundary.db.CRUD.annotation_crud import AnnotationCRUD, annotation_crud
from anchorkit.boundary.db.models.annotation_model import AnnotationModel
from anchorkit.configs.database import DatabaseSettings
from anchorkit.core.exceptions import (
    ConflictError,
    InitializationError,
    InvalidStatusTransitionError,
    NotFoundError,
    StoreNotInitializedError,
    ValidationError,
)
from anchorkit.core.text_hasher import generate_record_id, hash_text, verify_text_hash
from anchorkit.models.annotation import (
    AnnotationContext,
    AnnotationCreate,
    AnnotationFilter,
    AnnotationMetadata,
    AnnotationPatch,
    AnnotationRecord,
    AnnotationStats,
    AnnotationStatus,
    Position,
)
from anchorkit.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


def derive_domain(url: str) -> str:
    """Host name of ``url``, empty when it has none."""
    return urlparse(url).hostname or ""


def _validate(schema: type[BaseModel], payload: Any, operation: str) -> Any:
    if isinstance(payload, schema):
        return payload
    try:
        return schema.model_validate(payload or {})
    except PydanticValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(
            f"Invalid {operation} payload: {first.get('msg', 'validation failed')}",
            field=field,
            details={"errors": e.error_count()},
        ) from e


class RecordStore:
    """
    Async annotation record store.

    Attributes:
        settings: Database connection settings
        crud: Annotation CRUD operations
    """

    def __init__(
        self,
        settings: DatabaseSettings | None = None,
        crud: AnnotationCRUD | None = None,
    ) -> None:
        """
        Initialize record store. No connection is made until initialize().

        Args:
            settings: Database settings (defaults from environment)
            crud: CRUD implementation (defaults to the shared singleton)
        """
        self.settings = settings or DatabaseSettings()
        self.crud = crud or annotation_crud
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._write_lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        """Whether initialize() has completed successfully."""
        return self._session_factory is not None

    async def initialize(self) -> None:
        """
        Open the database and create the schema. Idempotent.

        Raises:
            InitializationError: If the engine or schema cannot be created
        """
        if self.initialized:
            return

        engine: AsyncEngine | None = None
        try:
            engine = get_async_engine(self.settings)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            log_exception_with_context(
                logger,
                "Record store initialization failed",
                e,
                dialect=self.settings.url.split(":", 1)[0],
            )
            if engine is not None:
                await engine.dispose()
            raise InitializationError(
                "Failed to initialize record store",
                {"error_type": type(e).__name__, "error_msg": str(e)},
            ) from e

        self._engine = engine
        self._session_factory = get_async_session_factory(engine)
        logger.info("Record store initialized")

    async def close(self) -> None:
        """Dispose the engine. The store must be initialized again before reuse."""
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def _require_ready(self, operation: str) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise StoreNotInitializedError(operation)
        return self._session_factory

    @staticmethod
    def _to_record(model: AnnotationModel) -> AnnotationRecord:
        return AnnotationRecord(
            id=model.id,
            url=model.url,
            domain=model.domain,
            selector=model.selector,
            original_text=model.original_text,
            text_hash=model.text_hash,
            kind=model.kind,
            color=model.color,
            summary=model.summary,
            user_comment=model.user_comment,
            timestamp=model.timestamp,
            last_modified=model.last_modified,
            position=Position.model_validate(model.position or {}),
            context=AnnotationContext.model_validate(model.context or {}),
            status=model.status,
            metadata=AnnotationMetadata.model_validate(model.page_metadata or {}),
        )

    async def create(self, partial: AnnotationCreate | dict[str, Any]) -> AnnotationRecord:
        """
        Persist a new record.

        Args:
            partial: Record fields; id, domain and timestamp are filled in when absent

        Returns:
            AnnotationRecord: Stored record with derived text_hash

        Raises:
            ValidationError: Payload is malformed
            ConflictError: A record with the same id exists
        """
        factory = self._require_ready("create")
        data: AnnotationCreate = _validate(AnnotationCreate, partial, "create")

        record_id = data.id or generate_record_id()
        timestamp = data.timestamp or utc_now()
        values = {
            "url": data.url,
            "domain": data.domain or derive_domain(data.url),
            "selector": data.selector,
            "original_text": data.original_text,
            "text_hash": hash_text(data.original_text),
            "kind": data.kind,
            "color": data.color,
            "summary": data.summary,
            "user_comment": data.user_comment,
            "position": data.position.model_dump(),
            "context": data.context.model_dump(),
            "status": data.status,
            "page_metadata": data.metadata.model_dump(),
            "timestamp": timestamp,
            "last_modified": timestamp,
        }

        async with self._write_lock:
            async with factory() as session:
                try:
                    async with session.begin():
                        if await self.crud.exists(session, record_id):
                            raise ConflictError(record_id)
                        model = await self.crud.create(session, id=record_id, **values)
                        record = self._to_record(model)
                except IntegrityError as e:
                    raise ConflictError(record_id) from e

        log_with_context(logger, logging.INFO, "Annotation created", record_id=record.id, url=record.url)
        return record

    async def get(self, record_id: str) -> AnnotationRecord | None:
        """
        Fetch a record by id.

        Returns:
            AnnotationRecord | None: The record, None when not found
        """
        factory = self._require_ready("get")
        async with factory() as session, session.begin():
            model = await self.crud.get_by_id(session, record_id)
            return self._to_record(model) if model is not None else None

    async def update(
        self,
        record_id: str,
        patch: AnnotationPatch | dict[str, Any],
    ) -> AnnotationRecord:
        """
        Replace the given fields of a record and bump last_modified.

        Args:
            record_id: Record to change
            patch: Fields to replace; nested objects replace wholesale

        Returns:
            AnnotationRecord: The updated record

        Raises:
            ValidationError: Unknown or immutable field in patch
            InvalidStatusTransitionError: Status change not allowed
            NotFoundError: No record with that id
        """
        factory = self._require_ready("update")
        data: AnnotationPatch = _validate(AnnotationPatch, patch, "update")
        changes = data.model_dump(exclude_unset=True)

        async with self._write_lock:
            async with factory() as session, session.begin():
                model = await self.crud.get_by_id(session, record_id)
                if model is None:
                    raise NotFoundError(record_id)

                if "status" in changes:
                    requested = AnnotationStatus(changes["status"])
                    if not model.status.can_transition_to(requested):
                        raise InvalidStatusTransitionError(record_id, model.status.value, requested.value)
                if "original_text" in changes:
                    changes["text_hash"] = hash_text(changes["original_text"])
                if "metadata" in changes:
                    changes["page_metadata"] = changes.pop("metadata")
                changes["last_modified"] = utc_now()

                model = await self.crud.update_by_id(session, record_id, **changes)
                record = self._to_record(model)

        log_with_context(
            logger,
            logging.DEBUG,
            "Annotation updated",
            record_id=record_id,
            fields=sorted(k for k in changes if k != "last_modified"),
        )
        return record

    async def delete(self, record_id: str) -> None:
        """
        Hard-delete a record.

        Raises:
            NotFoundError: No record with that id
        """
        factory = self._require_ready("delete")
        async with self._write_lock:
            async with factory() as session, session.begin():
                deleted = await self.crud.delete_by_id(session, record_id)
                if not deleted:
                    raise NotFoundError(record_id)
        log_with_context(logger, logging.INFO, "Annotation deleted", record_id=record_id)

    async def query(
        self,
        filter: AnnotationFilter | dict[str, Any] | None = None,
        **criteria: Any,
    ) -> Iterator[AnnotationRecord]:
        """
        Find records matching a filter, newest first.

        Criteria may be given as a filter object/dict or as keyword
        arguments (keywords win). Filtering and ordering happen in the
        database before limit and offset apply.

        Returns:
            Iterator[AnnotationRecord]: Single-pass iterator over matches
        """
        factory = self._require_ready("query")
        query_filter = self._merge_filter(filter, criteria)
        async with factory() as session, session.begin():
            models = await self.crud.search(
                session,
                url=query_filter.url,
                domain=query_filter.domain,
                status=query_filter.status,
                text_contains=query_filter.text_contains,
                limit=query_filter.limit,
                offset=query_filter.offset,
            )
            records = [self._to_record(model) for model in models]
        return iter(records)

    async def count(
        self,
        filter: AnnotationFilter | dict[str, Any] | None = None,
        **criteria: Any,
    ) -> int:
        """Number of records matching a filter; limit and offset are ignored."""
        factory = self._require_ready("count")
        query_filter = self._merge_filter(filter, criteria)
        async with factory() as session, session.begin():
            return await self.crud.count(
                session,
                url=query_filter.url,
                domain=query_filter.domain,
                status=query_filter.status,
                text_contains=query_filter.text_contains,
            )

    @staticmethod
    def _merge_filter(
        filter: AnnotationFilter | dict[str, Any] | None,
        criteria: dict[str, Any],
    ) -> AnnotationFilter:
        if isinstance(filter, AnnotationFilter):
            base = filter.model_dump(exclude_unset=True)
        else:
            base = dict(filter or {})
        base.update(criteria)
        return _validate(AnnotationFilter, base, "query")

    async def stats(self) -> AnnotationStats:
        """Record counts per status plus the total."""
        factory = self._require_ready("stats")
        async with factory() as session, session.begin():
            counts = await self.crud.count_by_status(session)
        return AnnotationStats(
            total=sum(counts.values()),
            active=counts.get(AnnotationStatus.ACTIVE, 0),
            archived=counts.get(AnnotationStatus.ARCHIVED, 0),
            deleted=counts.get(AnnotationStatus.DELETED, 0),
        )

    async def list_for_page(self, url: str) -> list[AnnotationRecord]:
        """Active records for ``url``, newest first."""
        return list(await self.query(url=url, status=AnnotationStatus.ACTIVE))

    async def find_by_text_hash(self, url: str, text_hash: str) -> AnnotationRecord | None:
        """Newest active record on ``url`` whose text hashes to ``text_hash``."""
        factory = self._require_ready("find_by_text_hash")
        async with factory() as session, session.begin():
            model = await self.crud.get_latest_by_text_hash(session, url, text_hash)
            return self._to_record(model) if model is not None else None

    async def clear(self) -> int:
        """
        Delete every record.

        Returns:
            int: Number of records removed
        """
        factory = self._require_ready("clear")
        async with self._write_lock:
            async with factory() as session, session.begin():
                removed = await self.crud.delete_all(session)
        log_with_context(logger, logging.INFO, "Record store cleared", removed=removed)
        return removed

    async def verify_integrity(self) -> list[str]:
        """
        Recompute every text hash.

        Returns:
            list[str]: Ids whose stored hash does not match their text
        """
        factory = self._require_ready("verify_integrity")
        async with factory() as session, session.begin():
            models = await self.crud.get_all(session)
            corrupted = [m.id for m in models if not verify_text_hash(m.original_text, m.text_hash)]
        if corrupted:
            log_with_context(logger, logging.WARNING, "Text hash mismatch", record_ids=corrupted)
        return corrupted

    async def ping(self) -> bool:
        """
        Check database connectivity.

        Returns:
            bool: True if a trivial query succeeds
        """
        factory = self._require_ready("ping")
        async with factory() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar_one() == 1
