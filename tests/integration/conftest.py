"""Fixtures for tests against a live PostgreSQL database."""

import os

import pytest
import pytest_asyncio

from src.config.settings import Settings
from src.storage.database import Database


def pytest_collection_modifyitems(config, items):
    if os.environ.get("DATABASE_URL"):
        return
    skip = pytest.mark.skip(reason="DATABASE_URL not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest_asyncio.fixture
async def db():
    database = Database(Settings())
    await database.connect()
    try:
        yield database
    finally:
        await database.disconnect()
