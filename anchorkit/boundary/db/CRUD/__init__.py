"""
CRUD operations for database models.

Exports base CRUD class and the annotation CRUD implementation
with a pre-instantiated singleton for direct use.

Usage:
    from anchorkit.boundary.db.CRUD import annotation_crud

    record = await annotation_crud.get_by_id(db, record_id)
"""

from anchorkit.boundary.db.CRUD.base_crud import BaseCRUD
from anchorkit.boundary.db.CRUD.annotation_crud import AnnotationCRUD, annotation_crud

__all__ = [
    "BaseCRUD",
    "AnnotationCRUD",
    "annotation_crud",
]
