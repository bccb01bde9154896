"""
Fixtures for exercising the HTTP API against the test database.
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from groupcal.api import dependencies
from groupcal.api.app import app as groupcal_app
from groupcal.config.settings import Settings


@pytest_asyncio.fixture(scope="session")
def app(server_settings: Settings, database):
    manager = server_settings.async_manager()

    async def get_async_session():
        async with manager.session() as session:
            async with session.begin():
                yield session

    groupcal_app.dependency_overrides[dependencies.SETTINGS] = lambda: server_settings
    groupcal_app.dependency_overrides[dependencies.get_async_session] = (
        get_async_session
    )

    yield groupcal_app

    groupcal_app.dependency_overrides.clear()


@pytest_asyncio.fixture
def client_factory(app):
    """
    Returns a function creating a client with its own cookie jar, i.e. its
    own session.
    """

    def make_client() -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")

    yield make_client


@pytest_asyncio.fixture
def register():
    """
    Returns a coroutine function that registers `user_name`, logs the client
    in, and returns the new user's ID.
    """

    async def register_and_log_in(client: AsyncClient, user_name: str) -> str:
        response = await client.post(
            "/users", json={"user_name": user_name, "password": "password"}
        )
        assert response.status_code == 200

        response = await client.post(
            "/login", json={"user_name": user_name, "password": "password"}
        )
        assert response.status_code == 200

        return (await client.get("/session")).json()["user_id"]

    yield register_and_log_in
