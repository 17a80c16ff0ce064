"""
Database models package.

Exports:
  - AnnotationModel: Annotation ORM model

Dependencies: sqlalchemy, anchorkit.boundary.db.base
System role: Database model definitions for domain entities
"""

from anchorkit.boundary.db.models.annotation_model import AnnotationModel

__all__ = ["AnnotationModel"]
