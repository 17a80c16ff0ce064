"""
Application services.

Exports:
  - RecordStore: Durable annotation CRUD
  - AnnotationService, ReconciliationReport: Page-level orchestration
  - MessageDispatcher: Transport handler table
"""

from anchorkit.application.services.record_store import RecordStore
from anchorkit.application.services.annotation_service import AnnotationService, ReconciliationReport
from anchorkit.application.services.message_handlers import MessageDispatcher

__all__ = [
    "AnnotationService",
    "MessageDispatcher",
    "ReconciliationReport",
    "RecordStore",
]
