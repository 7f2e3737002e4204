"""Tests for the adapter registry."""

from unittest.mock import MagicMock

import pytest

from docgate.core.config import Settings
from docgate.core.exceptions import InternalError, ServiceError
from docgate.core.registry import ServiceContext, ServiceRegistry, build_default_registry
from docgate.infrastructure.auth import JWTAuthService
from docgate.infrastructure.data_services import MemoryDataService, SqlDataService
from docgate.infrastructure.logging_services import StructlogLoggingService


def test_resolve_builds_context_from_settings(settings):
    context = build_default_registry().resolve(settings)

    assert isinstance(context, ServiceContext)
    assert isinstance(context.data_service, MemoryDataService)
    assert isinstance(context.logging_service, StructlogLoggingService)
    assert isinstance(context.auth_service, JWTAuthService)
    assert context.settings is settings


def test_sql_adapter_uses_configured_limit():
    settings = Settings(
        data_service="sql",
        database_url="sqlite+aiosqlite:///:memory:",
        default_query_limit=7,
    )

    context = build_default_registry().resolve(settings)

    assert isinstance(context.data_service, SqlDataService)
    assert context.data_service.default_limit == 7


def test_unknown_adapter_raises_service_error(settings):
    settings = settings.model_copy(update={"data_service": "firestore"})

    with pytest.raises(ServiceError, match="firestore"):
        build_default_registry().resolve(settings)


def test_registry_frozen_after_resolve(settings):
    registry = build_default_registry()
    registry.resolve(settings)

    assert registry.frozen is True
    with pytest.raises(InternalError):
        registry.register("late", data_service=lambda s: MemoryDataService())


def test_custom_adapter_factories_receive_settings(settings):
    data_service = MemoryDataService()
    data_factory = MagicMock(return_value=data_service)
    registry = build_default_registry()
    registry.register("custom", data_service=data_factory)

    context = registry.resolve(settings.model_copy(update={"data_service": "custom"}))

    data_factory.assert_called_once()
    assert context.data_service is data_service


def test_names_are_case_insensitive(settings):
    registry = ServiceRegistry()
    registry.register("Mem", data_service=lambda s: MemoryDataService())
    registry.register("STRUCTLOG", logging_service=lambda s: StructlogLoggingService())
    registry.register("Jwt", auth_service=lambda s: JWTAuthService())

    context = registry.resolve(settings.model_copy(update={"data_service": "mem"}))

    assert isinstance(context.data_service, MemoryDataService)
