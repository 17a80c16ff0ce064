"""
Live page document.

Wraps a BeautifulSoup tree standing in for the host page's DOM. Host-side
edits made through the helper methods are reported to subscribers as
mutation records, the way a browser MutationObserver reports them.
Direct edits to ``soup`` (such as the marker renderer's wrappers) are
not reported.

Dependencies: bs4
System role: DOM adapter for anchoring, rendering and change observation
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable
from urllib.parse import urlparse

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag

from anchorkit.models.selection import BoundingRect, SelectionRange, SelectionSnapshot

logger = logging.getLogger(__name__)

SELECTOR_MAX_LENGTH = 100


class MutationKind(str, enum.Enum):
    """Kinds of change a subscriber can be told about."""

    CHILD_LIST = "childList"
    ATTRIBUTES = "attributes"
    CHARACTER_DATA = "characterData"


@dataclass
class MutationRecord:
    """One observed change to the document."""

    kind: MutationKind
    target: PageElement
    added_nodes: list[PageElement] = field(default_factory=list)
    removed_nodes: list[PageElement] = field(default_factory=list)
    attribute_name: str | None = None


MutationCallback = Callable[[list[MutationRecord]], None]


class Subscription:
    """Handle returned by ``PageDocument.subscribe``; cancel to stop delivery."""

    def __init__(self, document: "PageDocument", callback: MutationCallback) -> None:
        self._document = document
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        """Stop delivering mutations. Safe to call more than once."""
        if self.active:
            self.active = False
            self._document._unsubscribe(self)


class PageDocument:
    """
    HTML document with URL metadata and a mutation subscription.

    Attributes:
        soup: Parsed tree
        url: Page URL annotations are stored against
        domain: Host name of ``url``
        title: Page title (from <title> when not given)
    """

    def __init__(self, html: str, url: str, title: str | None = None) -> None:
        """
        Parse ``html`` into a live document.

        Args:
            html: Page markup
            url: Page URL
            title: Page title override
        """
        self.soup = BeautifulSoup(html, "html.parser")
        self.url = url
        self.domain = urlparse(url).hostname or ""
        if title is None and self.soup.title is not None:
            title = self.soup.title.get_text(strip=True)
        self.title = title or ""
        self._subscriptions: list[Subscription] = []

    @property
    def body(self) -> Tag:
        """The <body> element, or the whole tree for fragments."""
        return self.soup.body or self.soup

    def contains(self, node: PageElement | None) -> bool:
        """Whether ``node`` is still attached to this document."""
        if node is None:
            return False
        if node is self.soup:
            return True
        return any(parent is self.soup for parent in node.parents)

    def select(self, css: str) -> list[Tag]:
        """CSS select over the document."""
        return self.soup.select(css)

    def select_one(self, css: str) -> Tag | None:
        """First CSS match, or None."""
        return self.soup.select_one(css)

    def to_html(self) -> str:
        """Serialize the current tree."""
        return str(self.soup)

    # Subscription

    def subscribe(self, callback: MutationCallback) -> Subscription:
        """
        Register ``callback`` for mutation batches.

        Args:
            callback: Called with a list of MutationRecord per change

        Returns:
            Subscription: Cancel it to stop delivery
        """
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    @property
    def subscriber_count(self) -> int:
        """Number of live subscriptions."""
        return len(self._subscriptions)

    def notify(self, records: list[MutationRecord]) -> None:
        """
        Deliver ``records`` to every active subscriber.

        A failing subscriber is logged and does not stop delivery to the rest.
        """
        if not records:
            return
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.callback(records)
            except Exception:
                logger.exception("Mutation subscriber failed")

    # Host-side edits

    def append_html(self, parent: Tag, html: str) -> list[PageElement]:
        """
        Parse ``html`` and append its nodes to ``parent``.

        Returns:
            list[PageElement]: The appended nodes
        """
        fragment = BeautifulSoup(html, "html.parser")
        added = list(fragment.contents)
        for node in added:
            parent.append(node.extract())
        self.notify([MutationRecord(MutationKind.CHILD_LIST, parent, added_nodes=added)])
        return added

    def remove(self, node: PageElement) -> PageElement:
        """Detach ``node`` from the tree."""
        parent = node.parent
        node.extract()
        if parent is not None:
            self.notify([MutationRecord(MutationKind.CHILD_LIST, parent, removed_nodes=[node])])
        return node

    def replace_text(self, element: Tag, text: str) -> NavigableString:
        """
        Replace every child of ``element`` with a single text node.

        Returns:
            NavigableString: The new text node
        """
        removed = list(element.contents)
        element.clear()
        node = NavigableString(text)
        element.append(node)
        self.notify([
            MutationRecord(MutationKind.CHILD_LIST, element, added_nodes=[node], removed_nodes=removed)
        ])
        return node

    def wrap_element(self, node: PageElement, tag_name: str, **attrs: str) -> Tag:
        """
        Wrap ``node`` (element or text) in a new ``tag_name`` element.

        Returns:
            Tag: The new container
        """
        container = self.soup.new_tag(tag_name, attrs=attrs)
        parent = node.parent
        node.wrap(container)
        self.notify([MutationRecord(MutationKind.CHILD_LIST, parent or container, added_nodes=[container])])
        return container

    def set_attribute(self, element: Tag, name: str, value: str) -> None:
        """Set an attribute on ``element``."""
        element[name] = value
        self.notify([MutationRecord(MutationKind.ATTRIBUTES, element, attribute_name=name)])


def build_selector(element: Tag | None) -> str:
    """
    Best-effort ``tag#id.class`` selector for an element.

    Advisory only: never used to locate anchors.
    """
    if element is None or not isinstance(element, Tag):
        return ""
    selector = element.name or ""
    element_id = element.get("id")
    if element_id:
        selector += f"#{element_id}"
    classes = element.get("class") or []
    if classes:
        selector += "." + ".".join(classes)
    return selector[:SELECTOR_MAX_LENGTH]


def snapshot_selection(
    document: PageDocument,
    element: Tag,
    text: str,
    start_offset: int | None = None,
    bounding_rect: BoundingRect | None = None,
) -> SelectionSnapshot:
    """
    Capture a plain-data selection of ``text`` inside ``element``.

    Args:
        document: Document the element belongs to
        element: Element containing the selection
        text: Selected text
        start_offset: Offset of ``text`` within the element's text, if known
        bounding_rect: Viewport geometry, if known

    Returns:
        SelectionSnapshot: Detached copy of the selection
    """
    if not document.contains(element):
        logger.debug("Capturing selection from a detached element")

    container_text = element.get_text()
    if start_offset is None:
        found = container_text.find(text)
        start_offset = found if found >= 0 else None
    end_offset = start_offset + len(text) if start_offset is not None else None

    return SelectionSnapshot(
        text=text,
        range=SelectionRange(
            container_text=container_text,
            start_offset=start_offset,
            end_offset=end_offset,
            selector=build_selector(element),
        ),
        bounding_rect=bounding_rect,
        timestamp=datetime.now(timezone.utc),
    )
