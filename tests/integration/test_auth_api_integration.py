from gymhub.auth import views as auth_views
from gymhub.auth.models import AuthResponse
from gymhub.connect.embedding import ConnectContext, ConnectSession


def test_api_login_success_sets_cookie(client, monkeypatch):
    monkeypatch.setattr(
        auth_views, "svc_login",
        lambda email, pwd: AuthResponse(True, user={"id": "u1", "email": email}, session={"access_token": "AT"}),
    )
    res = client.post("/api/v1/auth/login", json={"email": "owner@example.com", "password": "x"})
    assert res.status_code == 200
    assert res.json()["access_token"] == "AT"
    assert "sb_access" in res.headers.get("set-cookie", "")


def test_api_login_invalid(client, monkeypatch):
    monkeypatch.setattr(auth_views, "svc_login", lambda email, pwd: AuthResponse(False, error="bad creds"))
    res = client.post("/api/v1/auth/login", json={"email": "owner@example.com", "password": "bad"})
    assert res.status_code == 401
    assert res.json()["detail"] == "bad creds"


def test_api_signup_without_session_returns_message(client, monkeypatch):
    monkeypatch.setattr(
        auth_views, "svc_signup",
        lambda email, password, full_name=None, gym_name=None: AuthResponse(True, error="Inscription réussie, vérifiez votre email"),
    )
    res = client.post("/api/v1/auth/signup", json={
        "email": "new@example.com", "password": "secret123", "full_name": "New Owner", "gym_name": "Iron Gym",
    })
    assert res.status_code == 200
    assert "vérifiez" in res.json()["message"]


def test_api_signup_short_password(client):
    res = client.post("/api/v1/auth/signup", json={"email": "new@example.com", "password": "short"})
    assert res.status_code == 422


def test_api_me_hides_token(client):
    res = client.get("/api/v1/auth/me")
    assert res.status_code == 200
    data = res.json()
    assert data["email"] == "owner@example.com"
    assert "token" not in data


def test_api_me_requires_auth(client, anonymous):
    assert client.get("/api/v1/auth/me").status_code == 401


def test_api_logout_discards_embedded_session(client, app):
    registry = app.state.connect_sessions
    registry.replace(ConnectSession(ConnectContext(user_id="gym-1", access_token="tok")))
    res = client.post("/api/v1/auth/logout")
    assert res.status_code == 200
    assert registry.get("gym-1") is None
