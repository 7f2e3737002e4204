"""SQLAlchemy-backed document store.

Stores every collection in the shared ``documents`` table. Metadata props
(``createdBy``, ``isActive``...) are filtered in SQL; user-field filters are
applied to the decoded JSON payload.
"""

import uuid
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docgate.core.exceptions import NotFoundError
from docgate.core.logging import get_logger
from docgate.domain.entities.collection_schema import METADATA_FIELDS
from docgate.infrastructure.data_services.base import DataService, Document, merge_fields
from docgate.infrastructure.persistence.database import DatabaseManager
from docgate.infrastructure.persistence.models import DocumentModel

logger = get_logger(__name__)

COLUMN_PROPS = {
    "id": DocumentModel.id,
    "isActive": DocumentModel.is_active,
    "createdBy": DocumentModel.created_by,
    "modifiedBy": DocumentModel.modified_by,
}


class SqlDataService(DataService):
    """Data service persisting documents through SQLAlchemy async sessions."""

    DEFAULT_LIMIT = 50

    def __init__(self, db: DatabaseManager, default_limit: int = DEFAULT_LIMIT) -> None:
        """Initialize the data service.

        Args:
            db: Database manager providing sessions.
            default_limit: Maximum documents returned by list reads.
        """
        self.db = db
        self.default_limit = default_limit

    async def connect(self) -> None:
        await self.db.create_tables()

    async def close(self) -> None:
        await self.db.disconnect()

    def get_current_date(self) -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _as_utc(value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def _to_document(cls, model: DocumentModel) -> Document:
        document: Document = {"id": model.id, **model.data}
        if model.created is not None:
            # SQLite drops the offset on read
            document["created"] = cls._as_utc(model.created)
            document["createdBy"] = model.created_by
            document["modified"] = cls._as_utc(model.modified)
            document["modifiedBy"] = model.modified_by
        document["isActive"] = model.is_active
        return document

    @staticmethod
    def _payload(data: Mapping[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in data.items() if key not in METADATA_FIELDS}

    def _stamp(self, model: DocumentModel, user_id: str | None, no_meta_data: bool) -> None:
        if not no_meta_data and user_id:
            model.modified = self.get_current_date()
            model.modified_by = user_id

    async def _query(
        self,
        collection_name: str,
        props: Mapping[str, Any] | None = None,
        include_inactive: bool = False,
        limit: int | None = None,
        newest_first: bool = False,
        predicate: Callable[[Document], bool] | None = None,
    ) -> list[Document]:
        query_limit = self.default_limit if limit is None else limit
        stmt = select(DocumentModel).where(DocumentModel.collection == collection_name)
        if not include_inactive:
            stmt = stmt.where(DocumentModel.is_active.is_(True))

        payload_props: dict[str, Any] = {}
        for prop, value in (props or {}).items():
            column = COLUMN_PROPS.get(prop)
            if column is not None:
                stmt = stmt.where(column == value)
            else:
                payload_props[prop] = value

        stmt = stmt.order_by(DocumentModel.seq.desc() if newest_first else DocumentModel.seq)
        filtered_in_python = bool(payload_props) or predicate is not None
        if not filtered_in_python:
            stmt = stmt.limit(query_limit)

        async with self.db.session() as session:
            result = await session.execute(stmt)
            models = result.scalars().all()

        documents = [self._to_document(model) for model in models]
        if filtered_in_python:
            documents = [
                doc
                for doc in documents
                if all(prop in doc and doc[prop] == value for prop, value in payload_props.items())
                and (predicate is None or predicate(doc))
            ]
        return documents[:query_limit]

    async def _get_model(
        self, session: AsyncSession, collection_name: str, document_id: str
    ) -> DocumentModel:
        result = await session.execute(
            select(DocumentModel).where(
                DocumentModel.collection == collection_name,
                DocumentModel.id == document_id,
            )
        )
        model = result.scalar_one_or_none()
        if model is None:
            raise NotFoundError(f"{collection_name}:{document_id} not found")
        return model

    async def create_document(
        self,
        collection_name: str,
        data: Mapping[str, Any],
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        model = DocumentModel(
            id=uuid.uuid4().hex,
            collection=collection_name,
            data=self._payload(data),
            is_active=True,
        )
        if not no_meta_data:
            now = self.get_current_date()
            model.created = now
            model.created_by = user_id
            model.modified = now
            model.modified_by = user_id

        async with self.db.session() as session:
            session.add(model)
            await session.commit()

        logger.debug("Document inserted", collection=collection_name, document_id=model.id)
        return self._to_document(model)

    async def get_document_by_id(
        self, collection_name: str, document_id: str, include_inactive: bool = False
    ) -> Document | None:
        documents = await self._query(
            collection_name, {"id": document_id}, include_inactive=include_inactive, limit=1
        )
        return documents[0] if documents else None

    async def get_documents_by_prop(
        self,
        collection_name: str,
        prop: str,
        value: Any,
        include_inactive: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        return await self._query(collection_name, {prop: value}, include_inactive, limit)

    async def get_documents_by_props(
        self,
        collection_name: str,
        props: Mapping[str, Any],
        include_inactive: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        return await self._query(collection_name, props, include_inactive, limit)

    async def get_active_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        return await self._query(collection_name, limit=limit)

    async def get_all_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        return await self._query(collection_name, include_inactive=True, limit=limit)

    async def get_recent_documents(
        self, collection_name: str, limit: int | None = None
    ) -> list[Document]:
        return await self._query(collection_name, limit=limit, newest_first=True)

    async def query_documents_by_prop(
        self,
        collection_name: str,
        prop: str,
        query_text: str,
        limit: int | None = None,
    ) -> list[Document]:
        prefix = query_text.lower()

        def starts_with(doc: Document) -> bool:
            value = doc.get(prop)
            return isinstance(value, str) and value.lower().startswith(prefix)

        return await self._query(collection_name, limit=limit, predicate=starts_with)

    async def get_documents_where_in_prop(
        self,
        collection_name: str,
        prop: str,
        values: Sequence[Any],
        limit: int | None = None,
    ) -> list[Document]:
        column = COLUMN_PROPS.get(prop)
        if column is not None:
            query_limit = self.default_limit if limit is None else limit
            stmt = (
                select(DocumentModel)
                .where(DocumentModel.collection == collection_name, column.in_(list(values)))
                .order_by(DocumentModel.seq)
                .limit(query_limit)
            )
            async with self.db.session() as session:
                result = await session.execute(stmt)
                return [self._to_document(model) for model in result.scalars().all()]

        def is_in(doc: Document) -> bool:
            return prop in doc and doc[prop] in values

        return await self._query(
            collection_name, include_inactive=True, limit=limit, predicate=is_in
        )

    async def get_my_documents(
        self, collection_name: str, user_id: str, limit: int | None = None
    ) -> list[Document]:
        return await self._query(collection_name, {"createdBy": user_id}, limit=limit)

    async def get_user_documents(
        self, collection_name: str, user_id: str, limit: int | None = None
    ) -> list[Document]:
        return await self._query(
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
        async with self.db.session() as session:
            model = await self._get_model(session, collection_name, document_id)
            model.data = merge_fields(model.data, self._payload(data))
            self._stamp(model, user_id, no_meta_data)
            await session.commit()
            return self._to_document(model)

    async def _set_active(
        self,
        collection_name: str,
        document_id: str,
        is_active: bool,
        user_id: str | None,
        no_meta_data: bool,
    ) -> Document:
        async with self.db.session() as session:
            model = await self._get_model(session, collection_name, document_id)
            model.is_active = is_active
            self._stamp(model, user_id, no_meta_data)
            await session.commit()
            return self._to_document(model)

    async def archive_document(
        self,
        collection_name: str,
        document_id: str,
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        return await self._set_active(collection_name, document_id, False, user_id, no_meta_data)

    async def dearchive_document(
        self,
        collection_name: str,
        document_id: str,
        user_id: str | None,
        no_meta_data: bool = False,
    ) -> Document:
        return await self._set_active(collection_name, document_id, True, user_id, no_meta_data)

    async def delete_document(self, collection_name: str, document_id: str) -> dict[str, str]:
        async with self.db.session() as session:
            model = await self._get_model(session, collection_name, document_id)
            await session.delete(model)
            await session.commit()
        return {"id": document_id}
