"""API route builders."""

from docgate.infrastructure.api.routes.collection_router import build_collection_router

__all__ = ["build_collection_router"]
