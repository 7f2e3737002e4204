"""FastAPI application factory and configuration.

This module provides the application factory that resolves the configured
services, builds a controller per collection, mounts the collection
routers and installs middleware, exception handlers and lifecycle hooks.
"""

import importlib
import uuid
from collections.abc import Iterable, Mapping
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docgate.application.services.lifecycle_controller import LifecycleController
from docgate.core.config import Settings, get_settings
from docgate.core.exceptions import DocGateError, InternalError, NoContentError
from docgate.core.logging import bind_correlation_id, clear_context, configure_logging, get_logger
from docgate.core.registry import ServiceRegistry, build_default_registry
from docgate.domain.entities.collection_schema import CollectionSchema
from docgate.infrastructure.api.routes import build_collection_router

logger = get_logger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown internal error"


def load_collections(module_path: str | None) -> list[CollectionSchema]:
    """Load the collection schemas declared by a module's ``COLLECTIONS``.

    Entries may be ``CollectionSchema`` instances or plain dicts in the
    ``CollectionSchema.from_dict`` format.

    Raises:
        InternalError: If the module cannot be imported or declares no
            ``COLLECTIONS``.
    """
    if not module_path:
        logger.warning("No collections module configured")
        return []

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise InternalError(f"Cannot import collections module '{module_path}': {e}") from e

    declared = getattr(module, "COLLECTIONS", None)
    if declared is None:
        raise InternalError(f"Collections module '{module_path}' does not define COLLECTIONS")

    return [
        entry if isinstance(entry, CollectionSchema) else CollectionSchema.from_dict(entry)
        for entry in declared
    ]


def _as_schemas(schemas: Iterable[CollectionSchema | Mapping[str, Any]]) -> list[CollectionSchema]:
    return [s if isinstance(s, CollectionSchema) else CollectionSchema.from_dict(s) for s in schemas]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Connects the data service on startup and closes it on shutdown.
    """
    services = app.state.services
    settings = services.settings

    logger.info(
        "Starting DocGate",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        collections=sorted(app.state.controllers),
    )

    try:
        await services.data_service.connect()
        logger.info("Data service connected", data_service=settings.data_service)
    except Exception as e:
        logger.error("Failed to connect data service", error=str(e))
        raise

    yield

    logger.info("Shutting down DocGate")
    await services.data_service.close()
    logger.info("Data service closed")


def create_app(
    schemas: Iterable[CollectionSchema | Mapping[str, Any]] | None = None,
    settings: Settings | None = None,
    registry: ServiceRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        schemas: Collections to expose. Defaults to the ``COLLECTIONS`` of
            the configured collections module.
        settings: Application settings. Defaults to ``get_settings()``.
        registry: Adapter registry. Defaults to the built-in adapters.

    Returns:
        FastAPI: Configured FastAPI application instance.

    Raises:
        ServiceError: If a configured adapter is not registered.
        InternalError: If a collection schema is malformed or duplicated.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    registry = registry or build_default_registry()
    services = registry.resolve(settings)

    if schemas is None:
        collection_schemas = load_collections(settings.collections_module)
    else:
        collection_schemas = _as_schemas(schemas)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Policy-gated document collections",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.services = services
    app.state.controllers = {}

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_collections(app, collection_schemas)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints."""

    @app.get("/health", tags=["health"])
    async def health_check():
        """Returns 200 if the service is running."""
        settings = app.state.services.settings
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }


def register_collections(app: FastAPI, schemas: Iterable[CollectionSchema]) -> None:
    """Build a controller and mount a router for each collection.

    Raises:
        InternalError: If two collections share a name or a path.
    """
    services = app.state.services
    prefix = services.settings.api_prefix
    paths: set[str] = set()

    for schema in schemas:
        if schema.name in app.state.controllers or schema.path in paths:
            raise InternalError(f"Collection '{schema.name}' is declared twice")
        paths.add(schema.path)

        controller = LifecycleController(schema, services)
        app.state.controllers[schema.name] = controller
        app.include_router(
            build_collection_router(controller),
            prefix=f"{prefix}/{schema.path.strip('/')}",
            tags=[schema.name],
        )
        logger.debug("Collection mounted", collection=schema.name, full_crud=schema.full_crud)


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy to HTTP responses."""

    @app.exception_handler(NoContentError)
    async def no_content_handler(request: Request, exc: NoContentError):
        return Response(status_code=exc.status_code)

    @app.exception_handler(DocGateError)
    async def docgate_error_handler(request: Request, exc: DocGateError):
        logger.info(
            "Request failed",
            path=str(request.url.path),
            method=request.method,
            status_code=exc.status_code,
            error=exc.message,
            exc_type=type(exc).__name__,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(status_code=500, content={"error": UNKNOWN_ERROR_MESSAGE})


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware."""

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log requests and propagate a correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info("Request started", method=request.method, path=str(request.url.path))

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()
