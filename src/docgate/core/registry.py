"""Name-keyed registry of collaborator adapters.

Adapters are registered by name, selected by configuration once at
startup, and handed to controllers as a ``ServiceContext``. Once resolved
the registry is frozen; nothing is re-resolved per request.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from docgate.core.config import Settings
from docgate.core.exceptions import InternalError, ServiceError
from docgate.core.logging import get_logger

if TYPE_CHECKING:
    from docgate.infrastructure.auth.authenticator import AuthService
    from docgate.infrastructure.data_services.base import DataService
    from docgate.infrastructure.logging_services.base import LoggingService

logger = get_logger(__name__)

DataServiceFactory = Callable[[Settings], "DataService"]
LoggingServiceFactory = Callable[[Settings], "LoggingService"]
AuthServiceFactory = Callable[[Settings], "AuthService"]


@dataclass(frozen=True)
class ServiceContext:
    """Collaborators resolved for the running process."""

    data_service: "DataService"
    logging_service: "LoggingService"
    auth_service: "AuthService"
    settings: Settings


class ServiceRegistry:
    """Registry of adapter factories keyed by name.

    Each kind (data, logging, auth) has its own namespace. Factories take
    the settings so adapters can read their own configuration.
    """

    def __init__(self) -> None:
        self._data_services: dict[str, DataServiceFactory] = {}
        self._logging_services: dict[str, LoggingServiceFactory] = {}
        self._auth_services: dict[str, AuthServiceFactory] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        name: str,
        data_service: DataServiceFactory | None = None,
        logging_service: LoggingServiceFactory | None = None,
        auth_service: AuthServiceFactory | None = None,
    ) -> None:
        """Register adapter factories under a name.

        Raises:
            InternalError: If the registry is already frozen.
        """
        if self._frozen:
            raise InternalError("Service registry is frozen")
        key = name.strip().lower()
        if data_service is not None:
            self._data_services[key] = data_service
        if logging_service is not None:
            self._logging_services[key] = logging_service
        if auth_service is not None:
            self._auth_services[key] = auth_service

    def freeze(self) -> None:
        self._frozen = True

    @staticmethod
    def _pick(factories: dict[str, Callable], kind: str, name: str) -> Callable:
        try:
            return factories[name]
        except KeyError:
            raise ServiceError(f"No {kind} service registered as '{name}'") from None

    def resolve(self, settings: Settings) -> ServiceContext:
        """Build the service context selected by configuration and freeze.

        Raises:
            ServiceError: If a configured adapter name is not registered.
        """
        data_factory = self._pick(self._data_services, "data", settings.data_service)
        logging_factory = self._pick(self._logging_services, "logging", settings.logging_service)
        auth_factory = self._pick(self._auth_services, "auth", settings.auth_service)

        context = ServiceContext(
            data_service=data_factory(settings),
            logging_service=logging_factory(settings),
            auth_service=auth_factory(settings),
            settings=settings,
        )
        self.freeze()
        logger.info(
            "Services resolved",
            data_service=settings.data_service,
            logging_service=settings.logging_service,
            auth_service=settings.auth_service,
        )
        return context


def build_default_registry() -> ServiceRegistry:
    """Registry holding the built-in adapters."""
    from docgate.infrastructure.auth.authenticator import JWTAuthService
    from docgate.infrastructure.auth.jwt_service import JWTService
    from docgate.infrastructure.data_services.memory_data_service import MemoryDataService
    from docgate.infrastructure.data_services.sql_data_service import SqlDataService
    from docgate.infrastructure.logging_services.structlog_logging_service import (
        StructlogLoggingService,
    )
    from docgate.infrastructure.persistence.database import DatabaseManager

    registry = ServiceRegistry()
    registry.register(
        "memory",
        data_service=lambda s: MemoryDataService(default_limit=s.default_query_limit),
    )
    registry.register(
        "sql",
        data_service=lambda s: SqlDataService(
            DatabaseManager(s), default_limit=s.default_query_limit
        ),
    )
    registry.register("structlog", logging_service=lambda s: StructlogLoggingService())
    registry.register(
        "jwt",
        auth_service=lambda s: JWTAuthService(
            JWTService(secret_key=s.secret_key, issuer=s.jwt_issuer)
        ),
    )
    return registry
