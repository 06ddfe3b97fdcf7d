"""Shared fixtures: a throwaway SQLite database, a scripted provider and an API client."""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from medchat.core.domain.entities import Profile
from medchat.infrastructure.adapters.database.connection import DatabaseManager
from medchat.infrastructure.adapters.database.repositories import ProfileRepositoryImpl
from medchat.infrastructure.config.settings import Settings
from medchat.infrastructure.di.container import get_container
from tests.fakes import FakeChatService, make_settings


@pytest.fixture
def fake_chat_service() -> FakeChatService:
    return FakeChatService()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
async def db_manager(settings):
    manager = DatabaseManager(settings.database)
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
async def stored_profile(db_manager) -> Profile:
    async with db_manager.get_session() as session:
        return await ProfileRepositoryImpl(session).save(
            Profile.create(email="sam@example.com", display_name="Sam")
        )


@pytest.fixture
def client(settings, fake_chat_service):
    from main import create_app

    # Registered before startup; the lifespan keeps what is already there
    get_container().register_chat_service(fake_chat_service)
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def create_profile(client):
    """Register a profile and return the headers that identify it."""

    def _create(email: str = "jane@example.com", display_name: str = "Jane", specialty: Optional[str] = None):
        payload = {"email": email, "display_name": display_name}
        if specialty is not None:
            payload["preferred_specialty"] = specialty
        response = client.post("/api/v1/profiles", json=payload)
        assert response.status_code == 201, response.text
        return {"X-User-Id": response.json()["user_id"]}

    return _create


@pytest.fixture
def auth_headers(create_profile):
    return create_profile()


@pytest.fixture
def session_id(client, auth_headers) -> str:
    response = client.post("/api/v1/chat/sessions", json={"specialty": "cardiology"}, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["session_id"]
