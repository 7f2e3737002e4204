"""Pytest configuration for unit tests."""

from typing import AsyncGenerator

import pytest_asyncio

from docgate.core.config import Settings
from docgate.infrastructure.data_services import SqlDataService
from docgate.infrastructure.persistence.database import DatabaseManager


@pytest_asyncio.fixture
async def sql_data_service() -> AsyncGenerator[SqlDataService, None]:
    """SQL data service over an in-memory SQLite database."""
    db = DatabaseManager(Settings(database_url="sqlite+aiosqlite:///:memory:"))
    service = SqlDataService(db)
    await service.connect()

    yield service

    await db.drop_tables()
    await service.close()
