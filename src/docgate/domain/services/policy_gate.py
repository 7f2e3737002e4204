"""Policy gate deciding whether a requester may perform an operation.

Decisions depend on the operation, the collection options, and for
ownership-based operations on the existing document's ``createdBy``.
Refusals always raise ``AuthError``; a missing document for an
ownership-based operation raises ``NotFoundError`` first.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from docgate.core.exceptions import AuthError, NotFoundError
from docgate.domain.entities.collection_schema import CollectionOptions
from docgate.domain.entities.requester import ANONYMOUS, Requester


class Operation(str, Enum):
    """Operations governed by the policy gate."""

    CREATE = "create"
    READ_ONE = "read_one"
    READ_ACTIVE = "read_active"
    READ_BY_PROP = "read_by_prop"
    READ_BY_PROPS = "read_by_props"
    READ_RECENT = "read_recent"
    SEARCH = "search"
    READ_ALL = "read_all"
    READ_OWNER = "read_owner"
    READ_MINE = "read_mine"
    UPDATE = "update"
    ARCHIVE = "archive"
    DEARCHIVE = "dearchive"
    DELETE = "delete"


PUBLIC_READS = frozenset({
    Operation.READ_ONE,
    Operation.READ_ACTIVE,
    Operation.READ_BY_PROP,
    Operation.READ_BY_PROPS,
    Operation.READ_RECENT,
    Operation.SEARCH,
})

ADMIN_ONLY = frozenset({Operation.READ_ALL, Operation.READ_OWNER, Operation.DEARCHIVE})

OWNERSHIP_REQUIRED = frozenset({Operation.UPDATE, Operation.ARCHIVE, Operation.DELETE})

NOT_AUTHENTICATED = "User is not authenticated"
LOGIN_REQUIRED = "You must be logged in to see this"
NOT_PERMITTED = "User is not authorized to perform this action"


def is_owner(requester: Requester, existing: Mapping[str, Any]) -> bool:
    """Whether the requester created the existing document."""
    return requester.is_authenticated and requester.uid == existing.get("createdBy")


class PolicyGate:
    """Authorization matrix for collection operations."""

    @classmethod
    def authorize(
        cls,
        operation: Operation,
        requester: Requester | None,
        options: CollectionOptions,
        existing: Mapping[str, Any] | None = None,
    ) -> None:
        """Check that a requester may perform an operation.

        Args:
            operation: The operation being attempted.
            requester: The caller; None is treated as anonymous.
            options: The collection's policy options.
            existing: The current document, required for ownership checks.

        Raises:
            NotFoundError: If an ownership check has no existing document.
            AuthError: If the requester is not allowed to proceed.
        """
        requester = requester or ANONYMOUS

        if operation is Operation.CREATE:
            if options.is_public_post and options.no_meta_data:
                return
            if not requester.is_authenticated:
                raise AuthError(NOT_AUTHENTICATED)
            return

        if operation in PUBLIC_READS:
            if options.is_admin_only:
                if not requester.is_admin:
                    raise AuthError(NOT_AUTHENTICATED)
                return
            if options.is_public_get:
                return
            if not requester.is_authenticated:
                raise AuthError(LOGIN_REQUIRED)
            return

        if operation is Operation.READ_MINE:
            if not requester.is_authenticated:
                raise AuthError(NOT_AUTHENTICATED)
            if options.is_admin_only and not requester.is_admin:
                raise AuthError(NOT_AUTHENTICATED)
            return

        if operation in ADMIN_ONLY:
            if not requester.is_admin:
                raise AuthError(NOT_AUTHENTICATED)
            return

        if operation in OWNERSHIP_REQUIRED:
            if existing is None:
                raise NotFoundError("Document not found")
            if not requester.is_authenticated:
                raise AuthError(NOT_AUTHENTICATED)
            if requester.is_admin:
                return
            owner_allowed = operation is not Operation.DELETE or options.allow_user_delete
            if owner_allowed and is_owner(requester, existing):
                return
            raise AuthError(NOT_PERMITTED)

        raise AuthError(f"Unsupported operation: {operation}")
