import pytest
from fastapi.testclient import TestClient

from backend.auth.dependencies import get_token_settings
from backend.database import get_db
from backend.main import app
from backend.routes.proximity_routes import get_place_provider


@pytest.fixture
def provider(fake_provider):
    return fake_provider()


@pytest.fixture
def client(db_session, token_settings, provider):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_settings] = lambda: token_settings
    app.dependency_overrides[get_place_provider] = lambda: provider
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(make_token):
    def _auth_headers(user_id: int = 1, role: str = 'user') -> dict:
        return {'Authorization': f'Bearer {make_token(user_id=user_id, role=role)}'}

    return _auth_headers
