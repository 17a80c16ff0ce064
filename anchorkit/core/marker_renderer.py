"""
Marker renderer.

Wraps a resolved element in an interactive ``<span>`` carrying the record
id in a reserved attribute, and removes exactly that wrapper again on
unrender. Bindings from record id to wrapper are transient and rebuilt
every session; the record store stays the source of truth.

Dependencies: bs4, anchorkit.configs
System role: Visible side of reanchoring
"""

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Iterable

from bs4 import PageElement, Tag

from anchorkit.boundary.dom.page_document import PageDocument
from anchorkit.configs.anchoring import MarkerSettings
from anchorkit.core.exceptions import RenderError
from anchorkit.core.text_hasher import clean_text, truncate
from anchorkit.models.annotation import AnnotationKind, AnnotationRecord

logger = logging.getLogger(__name__)

HOVER_ATTRIBUTE = "data-ann-hover"
NOTE_STYLE = (
    "background-color: rgba(255, 235, 59, 0.3); "
    "border-bottom: 2px solid #ff9800; cursor: pointer;"
)

ActivateCallback = Callable[[AnnotationRecord], None]


@dataclass
class Marker:
    """Live binding between a record and its wrapper."""

    record: AnnotationRecord
    wrapper: Tag
    element: PageElement
    handlers: dict[str, Callable[[], None]] = field(default_factory=dict)


class MarkerRenderer:
    """
    Renders and removes annotation markers in a live document.

    Attributes:
        document: Document markers are inserted into
        settings: Marker presentation settings
        on_activate: Called with the record when a marker is clicked
    """

    def __init__(
        self,
        document: PageDocument,
        settings: MarkerSettings | None = None,
        on_activate: ActivateCallback | None = None,
    ) -> None:
        """
        Initialize renderer.

        Args:
            document: Live document
            settings: Marker settings (defaults from environment)
            on_activate: Click callback
        """
        self.document = document
        self.settings = settings or MarkerSettings()
        self.on_activate = on_activate
        self._bindings: dict[str, Marker] = {}

    @property
    def bound_ids(self) -> set[str]:
        """Ids of records currently rendered."""
        return set(self._bindings)

    def is_bound(self, record_id: str) -> bool:
        """Whether ``record_id`` has a live marker."""
        return record_id in self._bindings

    def marker_for(self, record_id: str) -> Marker | None:
        """Binding for ``record_id``, if any."""
        return self._bindings.get(record_id)

    def find_wrapper(self, record_id: str) -> Tag | None:
        """Look a wrapper up in the document by its reserved attribute."""
        return self.document.soup.find(attrs={self.settings.marker_attribute: record_id})

    def _style(self, record: AnnotationRecord) -> str:
        if record.kind is AnnotationKind.NOTE:
            return NOTE_STYLE
        color = record.color or self.settings.default_color
        return f"background-color: {color}; cursor: pointer;"

    def _tooltip(self, record: AnnotationRecord) -> str:
        if record.summary:
            return record.summary
        return truncate(clean_text(record.original_text), self.settings.tooltip_length)

    def render(self, record: AnnotationRecord, element: PageElement) -> Tag:
        """
        Wrap ``element`` in a marker for ``record``.

        Rendering an already bound record returns its existing wrapper.

        Args:
            record: Annotation to display
            element: Resolved live element

        Returns:
            Tag: The wrapper

        Raises:
            RenderError: If the element is not attached to the document
        """
        existing = self._bindings.get(record.id)
        if existing is not None:
            return existing.wrapper

        if element.parent is None or not self.document.contains(element):
            raise RenderError("Cannot render marker on a detached element", record_id=record.id)

        attrs = {
            self.settings.marker_attribute: record.id,
            "class": (
                self.settings.note_class
                if record.kind is AnnotationKind.NOTE
                else self.settings.highlight_class
            ),
            "style": self._style(record),
            "title": self._tooltip(record),
        }
        if record.summary:
            attrs["data-ann-summary"] = record.summary
        if record.user_comment:
            attrs["data-ann-comment"] = record.user_comment

        wrapper = self.document.soup.new_tag("span", attrs=attrs)
        try:
            element.wrap(wrapper)
        except ValueError as e:
            raise RenderError(str(e), record_id=record.id) from e

        self._bindings[record.id] = Marker(
            record=record,
            wrapper=wrapper,
            element=element,
            handlers={
                "click": partial(self._activate, record.id),
                "mouseenter": partial(self._set_hover, record.id, True),
                "mouseleave": partial(self._set_hover, record.id, False),
            },
        )
        return wrapper

    def unrender(self, record_or_id: AnnotationRecord | str) -> bool:
        """
        Remove the marker for a record, restoring the wrapped node in place.

        Args:
            record_or_id: Record or record id

        Returns:
            bool: True if a binding existed
        """
        record_id = record_or_id if isinstance(record_or_id, str) else record_or_id.id
        marker = self._bindings.pop(record_id, None)
        if marker is None:
            return False
        if marker.wrapper.parent is not None:
            marker.wrapper.unwrap()
        return True

    def dispatch(self, record_id: str, event: str) -> bool:
        """
        Deliver an interaction event to a marker.

        Args:
            record_id: Bound record id
            event: ``click``, ``mouseenter`` or ``mouseleave``

        Returns:
            bool: True if a handler ran
        """
        marker = self._bindings.get(record_id)
        if marker is None:
            return False
        handler = marker.handlers.get(event)
        if handler is None:
            logger.debug(f"No handler for marker event {event}")
            return False
        handler()
        return True

    def _activate(self, record_id: str) -> None:
        marker = self._bindings.get(record_id)
        if marker is not None and self.on_activate is not None:
            self.on_activate(marker.record)

    def _set_hover(self, record_id: str, hovered: bool) -> None:
        marker = self._bindings.get(record_id)
        if marker is None:
            return
        if hovered:
            marker.wrapper[HOVER_ATTRIBUTE] = "true"
        elif HOVER_ATTRIBUTE in marker.wrapper.attrs:
            del marker.wrapper[HOVER_ATTRIBUTE]

    def prune_detached(self) -> list[str]:
        """
        Drop bindings whose wrapper is no longer in the document.

        Returns:
            list[str]: Ids whose binding was dropped
        """
        detached = [
            record_id
            for record_id, marker in self._bindings.items()
            if not self.document.contains(marker.wrapper)
        ]
        for record_id in detached:
            del self._bindings[record_id]
        return detached

    def retain_only(self, record_ids: Iterable[str]) -> list[str]:
        """
        Unrender every binding not in ``record_ids``.

        Returns:
            list[str]: Ids that were unrendered
        """
        keep = set(record_ids)
        stale = [record_id for record_id in self._bindings if record_id not in keep]
        for record_id in stale:
            self.unrender(record_id)
        return stale

    def clear(self) -> int:
        """
        Unrender every marker.

        Returns:
            int: Number of markers removed
        """
        record_ids = list(self._bindings)
        for record_id in record_ids:
            self.unrender(record_id)
        return len(record_ids)
