"""
tests/test_api_admins.py -- Integration tests for the admin REST routes.

These tests exercise the full stack: FastAPI routing -> Authenticator /
AdminService -> AdminStore -> error handlers -> response serialization.

Coverage:
  - POST /login: password and token strategies, bad credentials, missing fields
  - POST /admins: 201, duplicate email 409 (pre-check and store), password policy 422
  - GET/PUT/DELETE /admins/me: auth required, rename, delete revokes access
  - POST /admins/verify: valid token 200, garbage 401, deleted admin 404

Fixtures used (from conftest.py):
  - api_client: (client, token, email) -- TestClient with an admin JWT.
    The fixture creates testadmin@example.com with password "Secr3t!Pass".
"""

from __future__ import annotations

from fastapi.testclient import TestClient

ApiClient = tuple[TestClient, str, str]

# Password of the admin created by the api_client fixture.
ADMIN_PASSWORD = "Secr3t!Pass"


def _register(client: TestClient, email: str, password: str = "Str0ng!Pass", name: str = "Someone") -> dict:
    resp = client.post("/api/v1/admins", json={"email": email, "name": name, "password": password})
    assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
    return resp.json()


def _login(client: TestClient, email: str, password: str) -> str:
    resp = client.post("/api/v1/admins/login", json={"email": email, "password": password})
    assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
    return resp.json()["token"]


class TestLogin:
    def test_login_with_password(self, api_client: ApiClient) -> None:
        """Correct email and password yield a bearer token usable on /me."""
        client, _token, email = api_client
        resp = client.post("/api/v1/admins/login", json={"email": email, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 86400
        assert resp.headers["cache-control"] == "no-store"

        me = client.get("/api/v1/admins/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == email

    def test_login_explicit_password_strategy(self, api_client: ApiClient) -> None:
        client, _token, email = api_client
        resp = client.post(
            "/api/v1/admins/login",
            json={"strategy": "password", "email": email, "password": ADMIN_PASSWORD},
        )
        assert resp.status_code == 200

    def test_login_with_token_strategy(self, api_client: ApiClient) -> None:
        """A valid token can be exchanged for a fresh one."""
        client, token, _email = api_client
        resp = client.post("/api/v1/admins/login", json={"strategy": "token", "token": token})
        assert resp.status_code == 200, resp.text
        assert resp.json()["token"]

    def test_wrong_password_and_unknown_email_look_the_same(self, api_client: ApiClient) -> None:
        """Both failures answer 401 with an identical body."""
        client, _token, email = api_client
        wrong = client.post("/api/v1/admins/login", json={"email": email, "password": "Wrong!Pass1"})
        unknown = client.post(
            "/api/v1/admins/login",
            json={"email": "ghost@example.com", "password": "Wrong!Pass1"},
        )
        assert wrong.status_code == 401
        assert unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert wrong.json()["error"]["code"] == "bad_credentials"
        assert wrong.headers["www-authenticate"] == "Bearer"

    def test_login_with_bad_token(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        resp = client.post("/api/v1/admins/login", json={"strategy": "token", "token": "not.a.jwt"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_login_missing_password(self, api_client: ApiClient) -> None:
        client, _token, email = api_client
        resp = client.post("/api/v1/admins/login", json={"email": email})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "missing_field"

    def test_login_missing_token(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        resp = client.post("/api/v1/admins/login", json={"strategy": "token"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "missing_field"

    def test_login_unknown_strategy(self, api_client: ApiClient) -> None:
        """Strategies outside the closed set are rejected at the boundary."""
        client, _token, _email = api_client
        resp = client.post("/api/v1/admins/login", json={"strategy": "google", "token": "abc"})
        assert resp.status_code == 422


class TestRegister:
    def test_register_admin(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        data = _register(client, "new.admin@example.com", name="New Admin")
        assert data == {"email": "new.admin@example.com", "name": "New Admin"}
        assert "password" not in data
        assert "password_hash" not in data

    def test_register_duplicate_email(self, api_client: ApiClient) -> None:
        client, _token, email = api_client
        resp = client.post(
            "/api/v1/admins",
            json={"email": email, "name": "Impostor", "password": "Other!Pass9"},
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "conflict"

    def test_register_duplicate_past_precheck(self, api_client: ApiClient, monkeypatch) -> None:
        """A duplicate that slips past the find_one pre-check is still a 409 from the store."""
        client, _token, email = api_client
        monkeypatch.setattr(client.app.state.admin_service, "find_one", lambda _email: None)
        resp = client.post(
            "/api/v1/admins",
            json={"email": email, "name": "Racer", "password": "Rac3r!Pass"},
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "conflict"

    def test_register_long_password(self, api_client: ApiClient) -> None:
        """Passwords past 72 bytes are accepted and usable in full."""
        client, _token, _email = api_client
        password = "Aa1!" * 25
        _register(client, "long.pass@example.com", password=password)
        assert _login(client, "long.pass@example.com", password)

    def test_register_then_login(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        _register(client, "fresh@example.com", password="Fresh!Pass1")
        assert _login(client, "fresh@example.com", "Fresh!Pass1")

    def test_register_weak_passwords_rejected(self, api_client: ApiClient) -> None:
        """Each rule of the password policy is enforced with a 422."""
        client, _token, _email = api_client
        for weak in ("Sh0rt!", "alllower1!", "ALLUPPER1!", "NoDigits!!", "NoSpecial12"):
            resp = client.post(
                "/api/v1/admins",
                json={"email": "weak@example.com", "name": "Weak", "password": weak},
            )
            assert resp.status_code == 422, f"{weak!r} accepted: {resp.text}"
            assert resp.json()["error"]["code"] == "validation_error"

    def test_register_invalid_email_rejected(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        resp = client.post(
            "/api/v1/admins",
            json={"email": "not-an-email", "name": "X", "password": "Str0ng!Pass"},
        )
        assert resp.status_code == 422

    def test_register_empty_name_rejected(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        resp = client.post(
            "/api/v1/admins",
            json={"email": "noname@example.com", "name": "", "password": "Str0ng!Pass"},
        )
        assert resp.status_code == 422


class TestCurrentAdmin:
    def test_me_requires_auth(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        resp = client.get("/api/v1/admins/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_me_rejects_garbage_token(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        resp = client.get("/api/v1/admins/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    def test_me_rejects_other_scheme(self, api_client: ApiClient) -> None:
        client, token, _email = api_client
        resp = client.get("/api/v1/admins/me", headers={"Authorization": f"Basic {token}"})
        assert resp.status_code == 401

    def test_read_me(self, api_client: ApiClient) -> None:
        client, token, email = api_client
        resp = client.get("/api/v1/admins/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json() == {"email": email, "name": "Test Admin"}

    def test_rename_me(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        _register(client, "rename@example.com", password="Renam3!Pass", name="Before")
        token = _login(client, "rename@example.com", "Renam3!Pass")
        headers = {"Authorization": f"Bearer {token}"}

        resp = client.put("/api/v1/admins/me", json={"new_name": "  After  "}, headers=headers)
        assert resp.status_code == 200, resp.text
        assert resp.json()["name"] == "After"
        assert client.get("/api/v1/admins/me", headers=headers).json()["name"] == "After"

    def test_rename_requires_auth(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        resp = client.put("/api/v1/admins/me", json={"new_name": "X"})
        assert resp.status_code == 401

    def test_delete_me_revokes_access(self, api_client: ApiClient) -> None:
        """After deletion the old token no longer authenticates and login fails."""
        client, _token, _email = api_client
        _register(client, "leaving@example.com", password="Leav1ng!Pass")
        token = _login(client, "leaving@example.com", "Leav1ng!Pass")
        headers = {"Authorization": f"Bearer {token}"}

        resp = client.delete("/api/v1/admins/me", headers=headers)
        assert resp.status_code == 204

        assert client.get("/api/v1/admins/me", headers=headers).status_code == 401
        relogin = client.post(
            "/api/v1/admins/login",
            json={"email": "leaving@example.com", "password": "Leav1ng!Pass"},
        )
        assert relogin.status_code == 401


class TestVerify:
    def test_verify_valid_token(self, api_client: ApiClient) -> None:
        client, token, email = api_client
        resp = client.post("/api/v1/admins/verify", json={"token": token})
        assert resp.status_code == 200
        assert resp.json()["email"] == email

    def test_verify_garbage_token(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        resp = client.post("/api/v1/admins/verify", json={"token": "garbage"})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_verify_token_of_deleted_admin(self, api_client: ApiClient) -> None:
        client, _token, _email = api_client
        _register(client, "gone@example.com", password="G0ne!Pass")
        token = _login(client, "gone@example.com", "G0ne!Pass")
        client.delete("/api/v1/admins/me", headers={"Authorization": f"Bearer {token}"})

        resp = client.post("/api/v1/admins/verify", json={"token": token})
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"
