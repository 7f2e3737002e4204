"""Data services (document stores) and their implementations."""

from docgate.infrastructure.data_services.base import DataService, Document, merge_fields
from docgate.infrastructure.data_services.memory_data_service import MemoryDataService
from docgate.infrastructure.data_services.sql_data_service import SqlDataService

__all__ = [
    "DataService",
    "Document",
    "MemoryDataService",
    "SqlDataService",
    "merge_fields",
]
