"""Base abstractions for data services (document stores)."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

Document = dict[str, Any]


def merge_fields(existing: Mapping[str, Any], changes: Mapping[str, Any]) -> Document:
    """Shallow last-write-wins merge used by updates.

    Every key in ``changes`` replaces the key in ``existing``; keys absent
    from ``changes`` are kept. Nested values are replaced, never merged.
    """
    merged = dict(existing)
    merged.update(changes)
    return merged


class DataService(ABC):
    """Abstract base class for document stores.

    Documents are plain dicts carrying an ``id``, user fields, ``isActive``
    and, unless the collection opts out, ``created``/``createdBy``/
    ``modified``/``modifiedBy`` metadata. Single-document writes are atomic;
    nothing spanning several documents is.
    """

    async def connect(self) -> None:
        """Prepare the store for use (called once at startup)."""

    async def close(self) -> None:
        """Release resources (called once at shutdown)."""

    @abstractmethod
    async def create_document(
        self,
        collection_name: str,
        data: Mapping[str, Any],
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        """Insert a new active document and return it with its id."""
        ...

    @abstractmethod
    async def get_document_by_id(
        self, collection_name: str, document_id: str, include_inactive: bool = False
    ) -> Document | None:
        """Get a document, or None if absent (or inactive when excluded)."""
        ...

    @abstractmethod
    async def get_documents_by_prop(
        self,
        collection_name: str,
        prop: str,
        value: Any,
        include_inactive: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        """Get documents whose ``prop`` equals ``value``."""
        ...

    @abstractmethod
    async def get_documents_by_props(
        self,
        collection_name: str,
        props: Mapping[str, Any],
        include_inactive: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        """Get documents matching every prop/value pair at once."""
        ...

    @abstractmethod
    async def get_active_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        ...

    @abstractmethod
    async def get_all_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        """Get documents regardless of their active flag."""
        ...

    @abstractmethod
    async def get_recent_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        """Get active documents, newest first."""
        ...

    @abstractmethod
    async def query_documents_by_prop(
        self,
        collection_name: str,
        prop: str,
        query_text: str,
        limit: int | None = None,
    ) -> list[Document]:
        """Get active documents whose string ``prop`` starts with ``query_text`` (case-insensitive)."""
        ...

    @abstractmethod
    async def get_documents_where_in_prop(
        self,
        collection_name: str,
        prop: str,
        values: Sequence[Any],
        limit: int | None = None,
    ) -> list[Document]:
        """Get documents, active or not, whose ``prop`` equals one of ``values``."""
        ...

    @abstractmethod
    async def get_my_documents(
        self, collection_name: str, user_id: str, limit: int | None = None
    ) -> list[Document]:
        """Get active documents created by a user."""
        ...

    @abstractmethod
    async def get_user_documents(
        self, collection_name: str, user_id: str, limit: int | None = None
    ) -> list[Document]:
        """Get all documents created by a user, active or not."""
        ...

    @abstractmethod
    async def update_document(
        self,
        collection_name: str,
        document_id: str,
        data: Mapping[str, Any],
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        """Merge ``data`` into a document (see ``merge_fields``).

        Raises:
            NotFoundError: If the document does not exist.
        """
        ...

    @abstractmethod
    async def archive_document(
        self,
        collection_name: str,
        document_id: str,
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        """Mark a document inactive.

        Raises:
            NotFoundError: If the document does not exist.
        """
        ...

    @abstractmethod
    async def dearchive_document(
        self,
        collection_name: str,
        document_id: str,
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        """Mark a document active again.

        Raises:
            NotFoundError: If the document does not exist.
        """
        ...

    @abstractmethod
    async def delete_document(self, collection_name: str, document_id: str) -> dict[str, str]:
        """Permanently remove a document.

        Raises:
            NotFoundError: If the document does not exist.
        """
        ...
