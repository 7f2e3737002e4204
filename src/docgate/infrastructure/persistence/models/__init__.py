"""SQLAlchemy models for DocGate."""

from docgate.infrastructure.persistence.models.document import DocumentModel

__all__ = ["DocumentModel"]
