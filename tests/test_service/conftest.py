"""
Configuration variables and fixtures for the service layer tests.
"""

import pytest_asyncio
import structlog

from groupcal.config.settings import Settings
from groupcal.core.uuid import uuid7


@pytest_asyncio.fixture(scope="session")
def session_manager(server_settings: Settings, database):
    yield server_settings.async_manager()


@pytest_asyncio.fixture(scope="session")
def logger():
    yield structlog.get_logger()


@pytest_asyncio.fixture
def user():
    # Stores do not check users against the user directory, so any fresh
    # identity will do.
    yield uuid7()


@pytest_asyncio.fixture
def other_user():
    yield uuid7()
