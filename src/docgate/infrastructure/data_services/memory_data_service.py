"""In-process document store.

Keeps documents in dicts keyed by collection and id. Used for tests and
local development; contents are lost when the process exits.
"""

import copy
import uuid
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from docgate.core.exceptions import NotFoundError
from docgate.core.logging import get_logger
from docgate.infrastructure.data_services.base import DataService, Document, merge_fields

logger = get_logger(__name__)


class MemoryDataService(DataService):
    """Dict-backed implementation of the data service contract."""

    DEFAULT_LIMIT = 50

    def __init__(self, default_limit: int = DEFAULT_LIMIT) -> None:
        self.default_limit = default_limit
        self._collections: dict[str, dict[str, Document]] = {}

    def get_current_date(self) -> datetime:
        return datetime.now(timezone.utc)

    def _collection(self, collection_name: str) -> dict[str, Document]:
        return self._collections.setdefault(collection_name, {})

    def _select(
        self,
        documents: Iterable[Document],
        limit: int | None,
    ) -> list[Document]:
        query_limit = self.default_limit if limit is None else limit
        return [copy.deepcopy(doc) for doc in documents][:query_limit]

    def _get_stored(self, collection_name: str, document_id: str) -> Document:
        stored = self._collection(collection_name).get(document_id)
        if stored is None:
            raise NotFoundError(f"{collection_name}:{document_id} not found")
        return stored

    def _stamp(self, document: Document, user_id: str | None, no_meta_data: bool) -> None:
        if not no_meta_data and user_id:
            document["modified"] = self.get_current_date()
            document["modifiedBy"] = user_id

    def _replace(self, collection_name: str, document: Document) -> Document:
        self._collection(collection_name)[document["id"]] = document
        return copy.deepcopy(document)

    async def create_document(
        self,
        collection_name: str,
        data: Mapping[str, Any],
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        document_id = uuid.uuid4().hex
        document: Document = {"id": document_id, **copy.deepcopy(dict(data))}
        if not no_meta_data:
            now = self.get_current_date()
            document["created"] = now
            document["createdBy"] = user_id
            document["modified"] = now
            document["modifiedBy"] = user_id
        document["isActive"] = True

        logger.debug("Document created", collection=collection_name, document_id=document_id)
        return self._replace(collection_name, document)

    async def get_document_by_id(
        self, collection_name: str, document_id: str, include_inactive: bool = False
    ) -> Document | None:
        stored = self._collection(collection_name).get(document_id)
        if stored is None:
            return None
        if not stored.get("isActive") and not include_inactive:
            return None
        return copy.deepcopy(stored)

    async def get_documents_by_prop(
        self,
        collection_name: str,
        prop: str,
        value: Any,
        include_inactive: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        return await self.get_documents_by_props(
            collection_name, {prop: value}, include_inactive, limit
        )

    async def get_documents_by_props(
        self,
        collection_name: str,
        props: Mapping[str, Any],
        include_inactive: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        matches = (
            doc
            for doc in self._collection(collection_name).values()
            if (include_inactive or doc.get("isActive"))
            and all(prop in doc and doc[prop] == value for prop, value in props.items())
        )
        return self._select(matches, limit)

    async def get_documents_where_in_prop(
        self,
        collection_name: str,
        prop: str,
        values: Sequence[Any],
        limit: int | None = None,
    ) -> list[Document]:
        matches = (
            doc
            for doc in self._collection(collection_name).values()
            if prop in doc and doc[prop] in values
        )
        return self._select(matches, limit)

    async def get_active_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        active = (doc for doc in self._collection(collection_name).values() if doc.get("isActive"))
        return self._select(active, limit)

    async def get_all_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        return self._select(self._collection(collection_name).values(), limit)

    async def get_recent_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        active = [doc for doc in self._collection(collection_name).values() if doc.get("isActive")]
        return self._select(reversed(active), limit)

    async def query_documents_by_prop(
        self,
        collection_name: str,
        prop: str,
        query_text: str,
        limit: int | None = None,
    ) -> list[Document]:
        prefix = query_text.lower()
        matches = (
            doc
            for doc in self._collection(collection_name).values()
            if doc.get("isActive")
            and isinstance(doc.get(prop), str)
            and doc[prop].lower().startswith(prefix)
        )
        return self._select(matches, limit)

    async def get_my_documents(
        self, collection_name: str, user_id: str, limit: int | None = None
    ) -> list[Document]:
        return await self.get_documents_by_props(
            collection_name, {"createdBy": user_id}, include_inactive=False, limit=limit
        )

    async def get_user_documents(
        self, collection_name: str, user_id: str, limit: int | None = None
    ) -> list[Document]:
        return await self.get_documents_by_props(
            collection_name, {"createdBy": user_id}, include_inactive=True, limit=limit
        )

    async def update_document(
        self,
        collection_name: str,
        document_id: str,
        data: Mapping[str, Any],
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        stored = self._get_stored(collection_name, document_id)
        updated = merge_fields(stored, copy.deepcopy(dict(data)))
        updated["id"] = document_id
        self._stamp(updated, user_id, no_meta_data)
        return self._replace(collection_name, updated)

    async def archive_document(
        self,
        collection_name: str,
        document_id: str,
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        stored = self._get_stored(collection_name, document_id)
        updated = merge_fields(stored, {"isActive": False})
        self._stamp(updated, user_id, no_meta_data)
        return self._replace(collection_name, updated)

    async def dearchive_document(
        self,
        collection_name: str,
        document_id: str,
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        stored = self._get_stored(collection_name, document_id)
        updated = merge_fields(stored, {"isActive": True})
        self._stamp(updated, user_id, no_meta_data)
        return self._replace(collection_name, updated)

    async def delete_document(self, collection_name: str, document_id: str) -> dict[str, str]:
        self._get_stored(collection_name, document_id)
        del self._collection(collection_name)[document_id]
        return {"id": document_id}
