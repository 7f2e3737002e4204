"""Router exposing one collection's lifecycle operations over HTTP.

The basic route set covers create, list active, get, update and archive.
Collections declared with ``full_crud`` also get the admin and query
routes. Fixed paths are registered before ``/{document_id}`` so they are
not captured by it.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, status

from docgate.application.services.lifecycle_controller import LifecycleController
from docgate.infrastructure.api.dependencies import RequesterDep
from docgate.infrastructure.data_services.base import Document

Limit = Annotated[int | None, Query(gt=0, description="Maximum number of documents")]


def build_collection_router(controller: LifecycleController, full: bool | None = None) -> APIRouter:
    """Build the router for a collection.

    Args:
        controller: Controller bound to the collection.
        full: Whether to include the full route set. Defaults to the
            schema's ``full_crud`` flag.

    Returns:
        APIRouter to be mounted under the collection's path.
    """
    if full is None:
        full = controller.schema.full_crud

    router = APIRouter()

    @router.post("", status_code=status.HTTP_201_CREATED)
    async def create_document(
        requester: RequesterDep,
        data: dict[str, Any] | None = Body(default=None),
    ) -> Document:
        """Create a new document."""
        return await controller.create_document(data, requester)

    @router.get("")
    async def get_active_documents(
        requester: RequesterDep, limit: Limit = None
    ) -> list[Document]:
        """List active documents."""
        return await controller.get_active_documents(requester, limit=limit)

    if full:

        @router.get("/all")
        async def get_all_documents(
            requester: RequesterDep, limit: Limit = None
        ) -> list[Document]:
            """List every document including archived ones (admin only)."""
            return await controller.get_all_documents(requester, limit=limit)

        @router.get("/mine")
        async def get_my_documents(
            requester: RequesterDep, limit: Limit = None
        ) -> list[Document]:
            """List the requester's own active documents."""
            return await controller.get_my_documents(requester, limit=limit)

        @router.get("/recent")
        async def get_recent_documents(
            requester: RequesterDep, limit: Limit = None
        ) -> list[Document]:
            """List active documents, newest first."""
            return await controller.get_recent_documents(requester, limit=limit)

        @router.get("/owner/{user_id}")
        async def get_user_documents(
            user_id: str, requester: RequesterDep, limit: Limit = None
        ) -> list[Document]:
            """List every document created by a user (admin only)."""
            return await controller.get_user_documents(requester, user_id, limit=limit)

        @router.get("/search/{prop}")
        async def search_documents(
            prop: str,
            requester: RequesterDep,
            q: str = Query(default="", description="Prefix to match"),
            limit: Limit = None,
        ) -> list[Document]:
            """Prefix search over a string property."""
            return await controller.search_documents_by_prop(prop, q, requester, limit=limit)

        @router.get("/by/{prop}/{value}")
        async def get_documents_by_prop(
            prop: str, value: str, requester: RequesterDep, limit: Limit = None
        ) -> list[Document]:
            """List documents whose property equals a string value."""
            return await controller.get_documents_by_prop(prop, value, requester, limit=limit)

        @router.post("/query")
        async def get_documents_by_props(
            requester: RequesterDep,
            props: dict[str, Any] | None = Body(default=None),
            limit: Limit = None,
        ) -> list[Document]:
            """List documents matching every given property value."""
            return await controller.get_documents_by_props(props or {}, requester, limit=limit)

    @router.get("/{document_id}")
    async def get_document(document_id: str, requester: RequesterDep) -> Document:
        """Get an active document by ID."""
        return await controller.get_document_by_id(document_id, requester)

    @router.put("/{document_id}")
    async def update_document(
        document_id: str,
        requester: RequesterDep,
        data: dict[str, Any] | None = Body(default=None),
    ) -> Document:
        """Update a document (creator or admin)."""
        return await controller.update_document(document_id, data, requester)

    @router.patch("/{document_id}/archive")
    async def archive_document(document_id: str, requester: RequesterDep) -> Document:
        """Archive a document (creator or admin)."""
        return await controller.archive_document(document_id, requester)

    if full:

        @router.patch("/{document_id}/dearchive")
        async def dearchive_document(document_id: str, requester: RequesterDep) -> Document:
            """Restore an archived document (admin only)."""
            return await controller.dearchive_document(document_id, requester)

        @router.delete("/{document_id}")
        async def delete_document(document_id: str, requester: RequesterDep) -> dict[str, str]:
            """Permanently delete a document."""
            return await controller.delete_document(document_id, requester)

    return router
