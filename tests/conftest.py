"""
Core configuration
"""

import pytest_asyncio

from groupcal.config.settings import Settings


@pytest_asyncio.fixture(scope="session")
def database_file(tmp_path_factory):
    yield {
        "database_type": "sqlite",
        "database_db": str(tmp_path_factory.mktemp("database") / "groupcal.db"),
        "database_echo": False,
    }


@pytest_asyncio.fixture(scope="session")
def server_settings(database_file):
    yield Settings(
        **database_file,
        create_tables=False,
        session_cookie_name="test_session",
    )


@pytest_asyncio.fixture(scope="session")
def database(server_settings: Settings):
    server_settings.sync_manager().create_all()
