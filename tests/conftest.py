import os
import pytest
from typing import Generator, Dict, Any
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

# Pas de Redis pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from gymhub.app import app as fastapi_app
from gymhub.utils.security import require_user

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/") or nodeid.startswith("unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/") or nodeid.startswith("integration/"):
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def gym_user() -> Dict[str, Any]:
    return {
        "id": "gym-1",
        "email": "owner@example.com",
        "metadata": {"full_name": "Gym Owner", "gym_name": "Iron Gym"},
        "token": "fake-token",
    }

# Simuler un gérant authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app, gym_user):
    app.dependency_overrides[require_user] = lambda: gym_user
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)

@pytest.fixture
def anonymous(app):
    """Retire l'override: les endpoints protégés répondent 401 sans jeton."""
    app.dependency_overrides.pop(require_user, None)
    yield

# Aucun accès réseau à Supabase pendant les tests
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("gymhub.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("gymhub.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("gymhub.infra.supabase_client.get_user_supabase", lambda token: MagicMock())
    monkeypatch.setattr("gymhub.health.service.health_supabase_info", lambda: {"connect_ok": True})

@pytest.fixture
def supabase_table():
    """
    Client Supabase factice dont les chaînes table().select().eq()...execute()
    renvoient `data`. Retourne (client, setter).
    """
    client = MagicMock()
    query = MagicMock()
    for name in ("select", "eq", "order", "or_", "maybe_single", "insert", "update", "upsert", "limit"):
        getattr(query, name).return_value = query
    client.table.return_value = query
    client.rpc.return_value = query

    def set_data(data):
        query.execute.return_value = MagicMock(data=data)

    set_data([])
    return client, query, set_data
