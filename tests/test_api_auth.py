"""
HTTP surface of the auth endpoints, /me and /health.
"""
from models.session import UserSession
from models.user import User

REGISTER = {
    "email": "  Jane@Example.com ",
    "password": "secret123",
    "full_name": "Jane Doe",
    "phone": "+84901234567",
}


def _register(client, **overrides):
    return client.post("/api/v1/auth/register", json={**REGISTER, **overrides})


def _login(client, email="jane@example.com", password="secret123"):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


class TestRegisterEndpoint:
    def test_created(self, client):
        resp = _register(client)
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["email"] == "jane@example.com"
        assert data["role"] == "customer"
        assert "password" not in data and "password_hash" not in data

    def test_duplicate_email(self, client):
        _register(client)
        resp = _register(client, full_name="Jane Again")
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "CONFLICT"

    def test_validation(self, client):
        resp = _register(client, password="123", phone="0901")
        assert resp.status_code == 422
        details = resp.get_json()["details"]
        assert "password" in details and "phone" in details

    def test_role_cannot_be_chosen(self, client):
        resp = _register(client, role="admin")
        assert resp.status_code == 422


class TestLoginEndpoint:
    def test_ok(self, client, storage):
        _register(client)
        resp = _login(client)
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["access_token"] and data["refresh_token"]
        assert data["expires_in"] == 900
        assert data["user"]["email"] == "jane@example.com"
        assert storage.count(UserSession) == 1

    def test_bad_credentials_are_indistinguishable(self, client):
        _register(client)
        wrong_password = _login(client, password="wrong-pass")
        unknown_email = _login(client, email="ghost@example.com")
        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.get_json() == unknown_email.get_json()


class TestRefreshAndLogout:
    def test_refresh_keeps_refresh_token(self, client):
        _register(client)
        tokens = _login(client).get_json()["data"]
        resp = client.post("/api/v1/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]})
        assert resp.status_code == 200
        assert resp.get_json()["data"]["refresh_token"] == tokens["refresh_token"]

    def test_refresh_unknown(self, client):
        resp = client.post("/api/v1/auth/refresh-token", json={"refresh_token": "nope"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "INVALID_CREDENTIALS"

    def test_logout_revokes_session(self, client, storage):
        _register(client)
        refresh = _login(client).get_json()["data"]["refresh_token"]

        resp = client.post("/api/v1/auth/logout", json={"refresh_token": refresh})
        assert resp.status_code == 200
        assert storage.count(UserSession) == 0

        again = client.post("/api/v1/auth/refresh-token", json={"refresh_token": refresh})
        assert again.status_code == 401

    def test_logout_requires_token(self, client):
        assert client.post("/api/v1/auth/logout", json={}).status_code == 422


class TestMe:
    def test_profile(self, client):
        _register(client)
        access = _login(client).get_json()["data"]["access_token"]
        resp = client.get("/api/v1/me", headers={"Authorization": f"Bearer {access}"})
        assert resp.status_code == 200
        assert resp.get_json()["data"]["full_name"] == "Jane Doe"

    def test_missing_header(self, client):
        resp = client.get("/api/v1/me")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"

    def test_malformed_header(self, client):
        assert client.get("/api/v1/me", headers={"Authorization": "Token abc"}).status_code == 401

    def test_deleted_user(self, client, storage):
        _register(client)
        access = _login(client).get_json()["data"]["access_token"]
        user = storage.get_session().query(User).one()
        storage.delete(user)
        storage.save()
        resp = client.get("/api/v1/me", headers={"Authorization": f"Bearer {access}"})
        assert resp.status_code == 404


class TestCreateAdminCommand:
    def test_creates_admin_once(self, app, client):
        runner = app.test_cli_runner()
        args = ["create-admin", "--email", "Boss@Example.com", "--password", "secret123", "--full-name", "Boss"]

        first = runner.invoke(args=args)
        assert first.exit_code == 0
        assert "created" in first.output

        second = runner.invoke(args=args)
        assert second.exit_code == 0
        assert "already exists" in second.output

        data = _login(client, email="boss@example.com").get_json()["data"]
        assert data["user"]["role"] == "admin"


def test_auth_routes_live_under_auth_prefix(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}
    for path in ("register", "login", "refresh-token", "logout"):
        assert f"/api/v1/auth/{path}" in rules
        assert f"/api/v1/{path}" not in rules


def test_refresh_endpoint_is_reachable_without_a_session(client):
    resp = client.post("/api/v1/auth/refresh-token", json={"refresh_token": "unknown"})
    assert resp.status_code == 401


def test_wrong_method_reports_its_own_code(client):
    resp = client.get("/api/v1/auth/login")
    assert resp.status_code == 405
    assert resp.get_json()["error"] == "METHOD_NOT_ALLOWED"


def test_health(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"
