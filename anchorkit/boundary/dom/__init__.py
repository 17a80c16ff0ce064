"""Live document adapter built on BeautifulSoup."""

from anchorkit.boundary.dom.page_document import (
    MutationKind,
    MutationRecord,
    PageDocument,
    Subscription,
    build_selector,
    snapshot_selection,
)

__all__ = [
    "MutationKind",
    "MutationRecord",
    "PageDocument",
    "Subscription",
    "build_selector",
    "snapshot_selection",
]
