"""Lifecycle controller orchestrating collection operations.

Each operation resolves the policy decision, sanitizes and validates input
where there is input, calls the data service, and writes an audit message.
Errors from the policy gate, the rule engine and the data service
propagate unchanged; only audit failures are absorbed.
"""

from collections.abc import Mapping
from typing import Any

from docgate.core.exceptions import NotFoundError
from docgate.core.formatting import get_diff_string, object_to_string
from docgate.core.logging import get_logger
from docgate.core.registry import ServiceContext
from docgate.domain.entities.collection_schema import CollectionSchema
from docgate.domain.entities.requester import ANONYMOUS, Requester
from docgate.domain.services.policy_gate import Operation, PolicyGate
from docgate.domain.services.rule_engine import RuleEngine
from docgate.domain.services.sanitizer import apply_defaults, filter_by_props
from docgate.infrastructure.data_services.base import Document

logger = get_logger(__name__)


class LifecycleController:
    """Create/read/update/archive/dearchive/delete for one collection."""

    def __init__(self, schema: CollectionSchema, context: ServiceContext) -> None:
        self.schema = schema
        self.context = context

    @property
    def collection_name(self) -> str:
        return self.schema.name

    @property
    def db(self):
        return self.context.data_service

    @property
    def no_meta_data(self) -> bool:
        return self.schema.options.no_meta_data

    def _authorize(
        self,
        operation: Operation,
        requester: Requester | None,
        existing: Mapping[str, Any] | None = None,
    ) -> Requester:
        requester = requester or ANONYMOUS
        PolicyGate.authorize(operation, requester, self.schema.options, existing)
        return requester

    def _audit(self, level: str, message: str) -> None:
        """Write an audit message; failures never affect the operation."""
        try:
            getattr(self.context.logging_service, level)(message)
        except Exception as e:
            logger.error(
                "Audit logging failed",
                collection=self.collection_name,
                audit_message=message,
                error=str(e),
            )

    async def _get_existing(self, document_id: str, include_inactive: bool) -> Document | None:
        return await self.db.get_document_by_id(
            self.collection_name, document_id, include_inactive=include_inactive
        )

    # CREATE

    async def create_document(self, data: Mapping[str, Any] | None, requester: Requester | None) -> Document:
        """Sanitize, default, validate and insert a new document.

        Raises:
            AuthError: If the requester may not create documents.
            ValidationError: If the document violates a field rule.
            ForbiddenError: If a composite uniqueness rule is violated.
        """
        requester = self._authorize(Operation.CREATE, requester)

        filtered = filter_by_props(data, self.schema.prop_names) if data is not None else None
        defaulted = apply_defaults(filtered, self.schema.fields) if filtered is not None else None
        await RuleEngine.validate(defaulted, self.schema, self.db, self.collection_name)

        document = await self.db.create_document(
            self.collection_name, defaulted, requester.uid, no_meta_data=self.no_meta_data
        )
        self._audit(
            "info",
            f"New item added to {self.collection_name} with ID {document['id']}:\n"
            f"{object_to_string(document)} by {requester.label()}",
        )
        return document

    # READ

    async def get_document_by_id(
        self, document_id: str, requester: Requester | None
    ) -> Document:
        """Get an active document.

        Raises:
            NotFoundError: If the document is missing or archived.
        """
        requester = self._authorize(Operation.READ_ONE, requester)
        document = await self._get_existing(document_id, include_inactive=False)
        if document is None:
            raise NotFoundError(f"ID {document_id} not found in {self.collection_name}")
        self._audit("info", f"{self.collection_name}: {document_id} retrieved by {requester.label()}")
        return document

    async def get_active_documents(
        self, requester: Requester | None, limit: int | None = None
    ) -> list[Document]:
        requester = self._authorize(Operation.READ_ACTIVE, requester)
        documents = await self.db.get_active_documents(self.collection_name, limit=limit)
        self._audit("info", f"Active {self.collection_name} retrieved by {requester.label()}")
        return documents

    async def get_all_documents(
        self, requester: Requester | None, limit: int | None = None
    ) -> list[Document]:
        """Get every document including archived ones (admin only)."""
        requester = self._authorize(Operation.READ_ALL, requester)
        documents = await self.db.get_all_documents(self.collection_name, limit=limit)
        self._audit("info", f"All {self.collection_name} retrieved by user {requester.label()}")
        return documents

    async def get_documents_by_prop(
        self,
        prop: str,
        value: Any,
        requester: Requester | None,
        limit: int | None = None,
    ) -> list[Document]:
        requester = self._authorize(Operation.READ_BY_PROP, requester)
        documents = await self.db.get_documents_by_prop(
            self.collection_name, prop, value, limit=limit
        )
        self._audit(
            "info",
            f"{self.collection_name} where {prop} = {value} retrieved by {requester.label()}",
        )
        return documents

    async def get_documents_by_props(
        self,
        props: Mapping[str, Any],
        requester: Requester | None,
        limit: int | None = None,
    ) -> list[Document]:
        requester = self._authorize(Operation.READ_BY_PROPS, requester)
        documents = await self.db.get_documents_by_props(self.collection_name, props, limit=limit)
        self._audit(
            "info",
            f"{self.collection_name} where {object_to_string(props)}\n"
            f" retrieved by {requester.label()}",
        )
        return documents

    async def get_recent_documents(
        self, requester: Requester | None, limit: int | None = None
    ) -> list[Document]:
        """Get active documents, newest first."""
        requester = self._authorize(Operation.READ_RECENT, requester)
        documents = await self.db.get_recent_documents(self.collection_name, limit=limit)
        self._audit("info", f"Recent {self.collection_name} retrieved by {requester.label()}")
        return documents

    async def search_documents_by_prop(
        self,
        prop: str,
        query_text: str,
        requester: Requester | None,
        limit: int | None = None,
    ) -> list[Document]:
        """Prefix search over a string property of active documents."""
        requester = self._authorize(Operation.SEARCH, requester)
        documents = await self.db.query_documents_by_prop(
            self.collection_name, prop, query_text, limit=limit
        )
        self._audit(
            "info",
            f"{self.collection_name} where {prop} starts with '{query_text}' "
            f"retrieved by {requester.label()}",
        )
        return documents

    async def get_my_documents(
        self, requester: Requester | None, limit: int | None = None
    ) -> list[Document]:
        requester = self._authorize(Operation.READ_MINE, requester)
        documents = await self.db.get_my_documents(self.collection_name, requester.uid, limit=limit)
        self._audit("info", f"Own {self.collection_name} retrieved by user {requester.label()}")
        return documents

    async def get_user_documents(
        self, requester: Requester | None, user_id: str, limit: int | None = None
    ) -> list[Document]:
        """Get every document created by ``user_id`` (admin only)."""
        requester = self._authorize(Operation.READ_OWNER, requester)
        documents = await self.db.get_user_documents(self.collection_name, user_id, limit=limit)
        self._audit(
            "info",
            f"{self.collection_name} owned by user {user_id} retrieved by user {requester.label()}",
        )
        return documents

    # UPDATE

    async def update_document(
        self,
        document_id: str,
        data: Mapping[str, Any] | None,
        requester: Requester | None,
    ) -> Document:
        """Validate the filtered payload and merge it into an active document.

        The payload is validated on its own, not merged with the stored
        document, so it must satisfy every rule by itself.

        Raises:
            NotFoundError: If the document is missing or archived.
            AuthError: If the requester is neither admin nor the creator.
            ValidationError: If the payload violates a field rule.
        """
        existing = await self._get_existing(document_id, include_inactive=False)
        if existing is None:
            raise NotFoundError(f"ID {document_id} not found in {self.collection_name}")
        requester = self._authorize(Operation.UPDATE, requester, existing)

        filtered = filter_by_props(data, self.schema.prop_names) if data is not None else None
        await RuleEngine.validate(
            filtered, self.schema, self.db, self.collection_name, document_id=document_id
        )

        updated = await self.db.update_document(
            self.collection_name,
            document_id,
            filtered,
            requester.uid,
            no_meta_data=self.no_meta_data,
        )
        self._audit(
            "info",
            f"{self.collection_name}: {document_id} updated by user {requester.label()}:"
            f"{get_diff_string(existing, updated)}",
        )
        return updated

    # ARCHIVE / DEARCHIVE

    async def archive_document(self, document_id: str, requester: Requester | None) -> Document:
        """Mark a document inactive. Archiving twice is not an error."""
        existing = await self._get_existing(document_id, include_inactive=True)
        if existing is None:
            raise NotFoundError(f"ID {document_id} not found in {self.collection_name}")
        requester = self._authorize(Operation.ARCHIVE, requester, existing)

        document = await self.db.archive_document(
            self.collection_name, document_id, requester.uid, no_meta_data=self.no_meta_data
        )
        self._audit("info", f"{self.collection_name}: {document_id} archived by user {requester.label()}")
        return document

    async def dearchive_document(self, document_id: str, requester: Requester | None) -> Document:
        """Mark an archived document active again (admin only)."""
        existing = await self._get_existing(document_id, include_inactive=True)
        if existing is None:
            raise NotFoundError(f"ID {document_id} not found in {self.collection_name}")
        requester = self._authorize(Operation.DEARCHIVE, requester, existing)

        document = await self.db.dearchive_document(
            self.collection_name, document_id, requester.uid, no_meta_data=self.no_meta_data
        )
        self._audit(
            "warn", f"{self.collection_name}: {document_id} - DE-ARCHIVED by user {requester.label()}"
        )
        return document

    # DELETE

    async def delete_document(self, document_id: str, requester: Requester | None) -> dict[str, str]:
        """Permanently remove a document.

        Raises:
            NotFoundError: If the document does not exist.
            AuthError: If the requester may not delete it.
        """
        existing = await self._get_existing(document_id, include_inactive=True)
        if existing is None:
            raise NotFoundError(f"ID {document_id} not found in {self.collection_name}")
        requester = self._authorize(Operation.DELETE, requester, existing)

        result = await self.db.delete_document(self.collection_name, document_id)
        self._audit("warn", f"{self.collection_name}: {document_id} - DELETED by user {requester.label()}")
        return result
