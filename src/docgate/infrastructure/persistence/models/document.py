"""SQLAlchemy model for the documents table.

All collections share one table; user fields live in a JSON payload and
lifecycle metadata in dedicated columns so it can be filtered on.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from docgate.infrastructure.persistence.database import Base


class DocumentModel(Base):
    """SQLAlchemy model for stored documents.

    Attributes:
        seq: Insertion order, used for stable and newest-first ordering.
        id: Opaque document ID (UUID hex).
        collection: Collection the document belongs to.
        data: User fields.
        is_active: False once archived.
        created/created_by/modified/modified_by: Metadata, NULL when the
            collection opts out of metadata.
    """

    __tablename__ = "documents"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    collection: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    modified: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    modified_by: Mapped[str | None] = mapped_column(String(128), nullable=True)

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, collection={self.collection})>"
