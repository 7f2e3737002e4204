"""Audit logging service writing through structlog."""

from docgate.core.logging import get_logger
from docgate.infrastructure.logging_services.base import LoggingService

AUDIT_LOGGER_NAME = "docgate.audit"


class StructlogLoggingService(LoggingService):
    """Sends audit messages to the structured application log.

    Entries carry ``audit=True`` so they can be routed separately from
    ordinary application logs.
    """

    def __init__(self, name: str = AUDIT_LOGGER_NAME) -> None:
        self._logger = get_logger(name).bind(audit=True)

    def log(self, message: str) -> None:
        self._logger.info(message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warn(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)
