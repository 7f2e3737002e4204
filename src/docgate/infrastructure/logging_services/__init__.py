"""Audit logging services."""

from docgate.infrastructure.logging_services.base import LoggingService
from docgate.infrastructure.logging_services.structlog_logging_service import (
    StructlogLoggingService,
)

__all__ = ["LoggingService", "StructlogLoggingService"]
