"""
anchorkit: persistent text annotations that survive page reloads and DOM changes.

Exports:
  - AnnotationService: Page-level composition root
  - RecordStore: Durable annotation store
  - PageDocument: Live HTML document with mutation subscription
"""

from anchorkit.application.services import AnnotationService, MessageDispatcher, ReconciliationReport, RecordStore
from anchorkit.boundary.dom import PageDocument, snapshot_selection

__all__ = [
    "AnnotationService",
    "MessageDispatcher",
    "PageDocument",
    "ReconciliationReport",
    "RecordStore",
    "snapshot_selection",
]

__version__ = "0.1.0"
