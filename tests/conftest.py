"""Pytest configuration for all tests."""

from unittest.mock import MagicMock

import pytest

from docgate.core.config import Settings, get_settings
from docgate.core.registry import ServiceContext
from docgate.domain.entities import (
    CollectionOptions,
    CollectionSchema,
    Requester,
    fkey_rule,
    number_rule,
    string_rule,
)
from docgate.infrastructure.auth import JWTAuthService, JWTService
from docgate.infrastructure.data_services import MemoryDataService
from docgate.infrastructure.logging_services import LoggingService

TEST_SECRET = "test-secret-key-for-docgate-tests-only"


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Settings are cached process-wide; start every test clean."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings for an in-memory, test-mode deployment."""
    return Settings(
        environment="testing",
        data_service="memory",
        logging_service="structlog",
        auth_service="jwt",
        secret_key=TEST_SECRET,
        log_level="WARNING",
        log_format="json",
    )


@pytest.fixture
def data_service() -> MemoryDataService:
    return MemoryDataService()


@pytest.fixture
def audit_logger() -> MagicMock:
    """Audit logging service that records calls."""
    return MagicMock(spec=LoggingService)


@pytest.fixture
def jwt_service() -> JWTService:
    return JWTService(secret_key=TEST_SECRET, issuer="docgate")


@pytest.fixture
def context(settings, data_service, audit_logger, jwt_service) -> ServiceContext:
    return ServiceContext(
        data_service=data_service,
        logging_service=audit_logger,
        auth_service=JWTAuthService(jwt_service),
        settings=settings,
    )


@pytest.fixture
def owner() -> Requester:
    return Requester(uid="u1")


@pytest.fixture
def other_user() -> Requester:
    return Requester(uid="u2")


@pytest.fixture
def admin() -> Requester:
    return Requester(uid="admin-1", admin=True)


@pytest.fixture
def users_schema() -> CollectionSchema:
    return CollectionSchema(
        name="users",
        fields={"displayName": string_rule(1, 50, required=True)},
    )


@pytest.fixture
def accounts_schema() -> CollectionSchema:
    """Schema with required, unique and foreign key fields."""
    return CollectionSchema(
        name="accounts",
        fields={
            "name": string_rule(1, 50, required=True),
            "email": string_rule(unique=True),
            "ownerId": fkey_rule("users"),
            "balance": number_rule(0, 1_000_000, default=0),
        },
    )


@pytest.fixture
def public_schema() -> CollectionSchema:
    """Anonymous-friendly collection without metadata."""
    return CollectionSchema(
        name="feedback",
        fields={"message": string_rule(1, 500, required=True)},
        options=CollectionOptions(is_public_get=True, is_public_post=True, no_meta_data=True),
    )
