"""
Annotation service orchestrator.

Composition root for one page: persists annotations through the record
store, anchors them in the live document, renders markers and keeps them
in place while the page changes.

Dependencies: anchorkit.application.services.record_store, anchorkit.core
System role: Public surface of the annotation core
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from anchorkit.application.services.record_store import RecordStore
from anchorkit.boundary.dom.page_document import PageDocument
from anchorkit.configs.settings import Settings
from anchorkit.core.anchoring import AnchorResolver, MatchStrategy
from anchorkit.core.change_watcher import ChangeWatcher
from anchorkit.core.exceptions import RenderError, ValidationError
from anchorkit.core.marker_renderer import ActivateCallback, MarkerRenderer
from anchorkit.core.text_hasher import extract_context, hash_text
from anchorkit.models.annotation import (
    AnnotationContext,
    AnnotationCreate,
    AnnotationFilter,
    AnnotationMetadata,
    AnnotationPatch,
    AnnotationRecord,
    AnnotationStatus,
    Position,
)
from anchorkit.models.selection import AnnotationAttributes, SelectionSnapshot
from anchorkit.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """
    Outcome of one reconciliation pass.

    Attributes:
        resolved: Record id to (confidence, strategy) for markers rendered this pass
        unresolved: Ids no matcher accepted
        failed: Ids whose resolve or render raised
        skipped: True when the pass did not run (in flight, destroyed or disabled)
    """

    resolved: dict[str, tuple[float, MatchStrategy]] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: bool = False


class AnnotationService:
    """Annotation lifecycle for a single live document."""

    def __init__(
        self,
        store: RecordStore,
        document: PageDocument,
        settings: Settings | None = None,
        resolver: AnchorResolver | None = None,
        renderer: MarkerRenderer | None = None,
        on_activate: ActivateCallback | None = None,
    ) -> None:
        """
        Initialize annotation service.

        Args:
            store: Record store (initialized by initialize())
            document: Live page document
            settings: Application settings (defaults from environment)
            resolver: Anchor resolver override
            renderer: Marker renderer override
            on_activate: Called with the record when its marker is clicked
        """
        self.store = store
        self.document = document
        self.settings = settings or Settings()
        self.resolver = resolver or AnchorResolver(
            document,
            settings=self.settings.anchoring,
            marker_attribute=self.settings.marker.marker_attribute,
        )
        self.renderer = renderer or MarkerRenderer(document, self.settings.marker, on_activate)
        self.watcher = ChangeWatcher(
            document,
            self.reconcile,
            debounce_seconds=self.settings.watcher.debounce_seconds,
            interval_seconds=self.settings.watcher.interval_seconds,
        )
        self.highlighting_enabled = True
        self._reconciling = False
        self._destroyed = False
        self._touched: set[str] = set()

    async def initialize(self) -> ReconciliationReport:
        """
        Open the store, start watching the document and render existing annotations.

        Returns:
            ReconciliationReport: Result of the initial pass

        Raises:
            InitializationError: If the store cannot be opened
        """
        await self.store.initialize()
        self._destroyed = False
        self.watcher.start()
        return await self.reconcile()

    async def destroy(self) -> None:
        """Stop watching, remove every marker and drop bindings. Stored data is kept."""
        self._destroyed = True
        await self.watcher.stop()
        removed = self.renderer.clear()
        logger.debug(f"Annotation service destroyed, {removed} markers removed")

    def _mark_touched(self, record_id: str) -> None:
        # The in-flight pass holds a record list read before this write.
        if self._reconciling:
            self._touched.add(record_id)

    def _try_render(self, record: AnnotationRecord) -> bool:
        try:
            match = self.resolver.resolve(record)
            if match is None:
                return False
            self.renderer.render(record, match.element)
            return True
        except RenderError as e:
            log_with_context(logger, logging.WARNING, "Marker render failed", record_id=record.id, error_msg=str(e))
            return False

    async def create_annotation(
        self,
        selection: SelectionSnapshot,
        attributes: AnnotationAttributes | None = None,
    ) -> AnnotationRecord:
        """
        Persist a new annotation for a selection and try to display it.

        Args:
            selection: Snapshot of the user's selection
            attributes: Kind, colour and note fields

        Returns:
            AnnotationRecord: Stored record

        Raises:
            ValidationError: If the selection text is blank
        """
        if not selection.text or not selection.text.strip():
            raise ValidationError("Selection text is empty", field="text")
        attributes = attributes or AnnotationAttributes()

        selection_range = selection.range
        before, after = ("", "")
        selector = ""
        if selection_range is not None:
            before, after = extract_context(
                selection_range.container_text,
                selection.text,
                self.settings.anchoring.context_window,
                selection_range.start_offset,
            )
            selector = selection_range.selector

        rect = selection.bounding_rect
        position = Position(x=rect.x, y=rect.y, width=rect.width, height=rect.height) if rect else Position()

        record = await self.store.create(
            AnnotationCreate(
                url=self.document.url,
                domain=self.document.domain or None,
                selector=selector,
                original_text=selection.text,
                kind=attributes.kind,
                color=attributes.color,
                summary=attributes.summary,
                user_comment=attributes.user_comment,
                timestamp=selection.timestamp,
                position=position,
                context=AnnotationContext(before=before, after=after),
                metadata=AnnotationMetadata(
                    page_title=self.document.title,
                    page_url=self.document.url,
                    user_id=attributes.user_id,
                ),
            )
        )

        self._mark_touched(record.id)
        if self.highlighting_enabled and not self._destroyed:
            self._try_render(record)
        return record

    async def update_annotation(
        self,
        record_id: str,
        patch: AnnotationPatch | dict[str, Any],
    ) -> AnnotationRecord:
        """
        Apply a patch, then re-render the annotation if it is still active.

        Raises:
            NotFoundError: No record with that id
            ValidationError: Invalid patch or status transition
        """
        record = await self.store.update(record_id, patch)
        self._mark_touched(record_id)
        self.renderer.unrender(record_id)
        if (
            record.status is AnnotationStatus.ACTIVE
            and self.highlighting_enabled
            and not self._destroyed
        ):
            self._try_render(record)
        return record

    async def delete_annotation(self, record_id: str) -> None:
        """
        Delete an annotation and remove its marker.

        Raises:
            NotFoundError: No record with that id
        """
        await self.store.delete(record_id)
        self._mark_touched(record_id)
        self.renderer.unrender(record_id)

    async def get_annotation(self, record_id: str) -> AnnotationRecord | None:
        """Fetch one annotation by id."""
        return await self.store.get(record_id)

    async def list_for_current_page(self) -> list[AnnotationRecord]:
        """Active annotations for the document's URL, newest first."""
        return await self.store.list_for_page(self.document.url)

    async def search(self, filter: AnnotationFilter | dict[str, Any] | None = None) -> list[AnnotationRecord]:
        """Query the store and materialize the results."""
        return list(await self.store.query(filter))

    async def find_annotation_for_text(self, text: str) -> AnnotationRecord | None:
        """Existing active annotation on this page for exactly ``text``."""
        if not text:
            return None
        return await self.store.find_by_text_hash(self.document.url, hash_text(text))

    async def set_highlighting_enabled(self, enabled: bool) -> ReconciliationReport:
        """
        Show or hide every marker.

        Returns:
            ReconciliationReport: Pass run after enabling; skipped when disabling
        """
        self.highlighting_enabled = enabled
        if not enabled:
            self.renderer.clear()
            return ReconciliationReport(skipped=True)
        return await self.reconcile()

    async def reconcile(self) -> ReconciliationReport:
        """
        Resolve and render every active annotation on the page that has no marker.

        Bindings whose wrapper left the document, or whose record is no
        longer active, are dropped first. Per-record failures are logged
        and the pass continues.

        Returns:
            ReconciliationReport: What happened to each record
        """
        if self._reconciling or self._destroyed or not self.highlighting_enabled:
            return ReconciliationReport(skipped=True)

        self._reconciling = True
        self._touched.clear()
        report = ReconciliationReport()
        try:
            records = await self.store.list_for_page(self.document.url)
            if self._destroyed:
                report.skipped = True
                return report

            # Records written during the await already carry their own markers.
            touched = set(self._touched)
            self.renderer.retain_only({record.id for record in records} | touched)
            self.renderer.prune_detached()

            for record in records:
                if self._destroyed:
                    report.skipped = True
                    break
                if record.id in touched or self.renderer.is_bound(record.id):
                    continue
                try:
                    match = self.resolver.resolve(record)
                    if match is None:
                        report.unresolved.append(record.id)
                        continue
                    self.renderer.render(record, match.element)
                    report.resolved[record.id] = (match.confidence, match.strategy)
                except RenderError as e:
                    log_with_context(
                        logger,
                        logging.WARNING,
                        "Marker render failed",
                        record_id=record.id,
                        error_msg=str(e),
                    )
                    report.failed.append(record.id)
                except Exception as e:
                    log_exception_with_context(logger, "Reconciliation failed for record", e, record_id=record.id)
                    report.failed.append(record.id)
        finally:
            self._reconciling = False
            self._touched.clear()

        if report.resolved or report.unresolved or report.failed:
            log_with_context(
                logger,
                logging.DEBUG,
                "Reconciliation pass complete",
                resolved=len(report.resolved),
                unresolved=len(report.unresolved),
                failed=len(report.failed),
            )
        return report
