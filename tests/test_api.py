"""HTTP-level tests: envelope shape, status mapping and the bearer gate.

Service behaviour is covered by the unit tests; these check that the routes
wire it up correctly.
"""
import pyotp
import pytest

from conftest import STRONG_PASSWORD

API = "/api/v1"


def _register(client, email="a@b.com", **overrides):
    body = {
        "email": email,
        "masterPassword": STRONG_PASSWORD,
        "confirmMasterPassword": STRONG_PASSWORD,
        "securityQuestion": "pet name",
        "securityAnswer": "Rex",
    }
    body.update(overrides)
    return client.post(f"{API}/auth/register", json=body)


def _login(client, email="a@b.com", password=STRONG_PASSWORD, **extra):
    return client.post(f"{API}/auth/login", json={"email": email, "masterPassword": password, **extra})


@pytest.fixture
def token(client):
    assert _register(client).status_code == 201
    return _login(client).json()["data"]["token"]


@pytest.fixture
def auth(token):
    return {"Authorization": f"Bearer {token}"}


def _error_code(response):
    body = response.json()
    assert body["success"] is False
    assert "timestamp" in body
    return body["error"]["code"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestAuthRoutes:
    def test_register_returns_id_in_envelope(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["id"]
        assert body["data"]["twoFactorProvisioning"] is None

    def test_register_validation_error(self, client):
        response = _register(client, masterPassword="short", confirmMasterPassword="short")

        assert response.status_code == 400
        assert _error_code(response) == "masterPasswordTooShort"

    def test_duplicate_email(self, client):
        _register(client)

        assert _error_code(_register(client)) == "emailAlreadyExists"

    def test_login_returns_token_and_camel_case_user(self, client):
        _register(client)

        response = _login(client)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"]
        assert data["user"]["email"] == "a@b.com"
        assert data["user"]["twoFactorEnabled"] is False
        assert "masterPasswordHash" not in data["user"]

    def test_bad_credentials_are_401(self, client):
        _register(client)

        response = _login(client, password="Wr0ng!Password?")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert _error_code(response) == "invalidCredentials"

    def test_two_factor_registration_and_login(self, client):
        response = _register(client, twoFactorEnabled=True, phone="+15551234567")

        provisioning = response.json()["data"]["twoFactorProvisioning"]
        assert provisioning["otpauthUri"].startswith("otpauth://totp/")
        assert provisioning["qrCodeBase64"]

        secret = pyotp.parse_uri(provisioning["otpauthUri"]).secret
        assert _error_code(_login(client)) == "twoFactorCodeRequired"
        assert _login(client, twoFactorCode=pyotp.TOTP(secret).now()).status_code == 200

    def test_logout_invalidates_token(self, client, auth):
        assert client.post(f"{API}/auth/logout", headers=auth).status_code == 200

        response = client.get(f"{API}/passwords", headers=auth)
        assert response.status_code == 401
        assert _error_code(response) == "invalidSession"

    def test_schema_error_is_400(self, client):
        response = client.post(f"{API}/auth/login", json={"email": "a@b.com"})

        assert response.status_code == 400
        assert _error_code(response) == "VALIDATION_ERROR"


class TestBearerGate:
    def test_missing_header(self, client):
        response = client.get(f"{API}/passwords")

        assert response.status_code == 401
        assert _error_code(response) == "authenticationRequired"

    def test_unknown_token(self, client):
        response = client.get(f"{API}/passwords", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401
        assert _error_code(response) == "invalidSession"


class TestPasswordRoutes:
    def test_crud(self, client, auth):
        created = client.post(
            f"{API}/passwords",
            json={"title": "GitHub", "password": "hunter2!", "url": "https://github.com"},
            headers=auth,
        )
        assert created.status_code == 201
        password_id = created.json()["data"]["id"]

        listed = client.get(f"{API}/passwords", headers=auth).json()["data"]
        assert [item["id"] for item in listed] == [password_id]
        assert "password" not in listed[0]
        assert listed[0]["isExpiringSoon"] is False

        detail = client.get(f"{API}/passwords/{password_id}", headers=auth).json()["data"]
        assert detail["password"] == "hunter2!"
        assert detail["category"] == "General"

        updated = client.put(f"{API}/passwords/{password_id}", json={"isFavorite": True}, headers=auth)
        assert updated.status_code == 200
        detail = client.get(f"{API}/passwords/{password_id}", headers=auth).json()["data"]
        assert detail["isFavorite"] is True
        assert detail["title"] == "GitHub"

        assert client.delete(f"{API}/passwords/{password_id}", headers=auth).status_code == 200
        missing = client.get(f"{API}/passwords/{password_id}", headers=auth)
        assert missing.status_code == 404
        assert _error_code(missing) == "passwordNotFound"

    def test_invalid_url_on_update(self, client, auth):
        password_id = client.post(
            f"{API}/passwords", json={"title": "t", "password": "x"}, headers=auth
        ).json()["data"]["id"]

        response = client.put(f"{API}/passwords/{password_id}", json={"url": "not a url"}, headers=auth)

        assert response.status_code == 400
        assert _error_code(response) == "invalidUrl"

    def test_null_favorite_on_update_is_rejected(self, client, auth):
        password_id = client.post(
            f"{API}/passwords", json={"title": "t", "password": "x", "isFavorite": True}, headers=auth
        ).json()["data"]["id"]

        response = client.put(f"{API}/passwords/{password_id}", json={"isFavorite": None}, headers=auth)

        assert response.status_code == 400
        assert _error_code(response) == "VALIDATION_ERROR"
        detail = client.get(f"{API}/passwords/{password_id}", headers=auth).json()["data"]
        assert detail["isFavorite"] is True

    def test_other_users_record_is_403(self, client, auth):
        password_id = client.post(
            f"{API}/passwords", json={"title": "t", "password": "x"}, headers=auth
        ).json()["data"]["id"]
        _register(client, email="b@c.com")
        other = {"Authorization": f"Bearer {_login(client, email='b@c.com').json()['data']['token']}"}

        response = client.get(f"{API}/passwords/{password_id}", headers=other)

        assert response.status_code == 403
        assert _error_code(response) == "unauthorized"


class TestRecoveryRoutes:
    def test_request_answer_does_not_reveal_account(self, client):
        _register(client)

        known = client.post(f"{API}/recovery/request", json={"email": "a@b.com"})
        unknown = client.post(f"{API}/recovery/request", json={"email": "nobody@b.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json()["data"] == unknown.json()["data"]
        assert "token" not in known.json()["data"]

    def test_full_flow(self, client, services):
        _register(client)
        token = services.recovery.request_recovery("a@b.com", "127.0.0.1").token

        question = client.get(f"{API}/recovery/{token}/question")
        assert question.json()["data"]["securityQuestion"] == "pet name"

        response = client.post(
            f"{API}/recovery/verify",
            json={
                "token": token,
                "securityAnswer": "rex",
                "newMasterPassword": "N3w!Secure#Key",
                "confirmNewMasterPassword": "N3w!Secure#Key",
            },
        )
        assert response.status_code == 200
        assert _login(client, password="N3w!Secure#Key").status_code == 200

    def test_verify_with_unknown_token(self, client):
        response = client.post(
            f"{API}/recovery/verify",
            json={
                "token": "dummy-token",
                "securityAnswer": "rex",
                "newMasterPassword": "N3w!Secure#Key",
                "confirmNewMasterPassword": "N3w!Secure#Key",
            },
        )

        assert response.status_code == 400
        assert _error_code(response) == "invalidOrExpiredToken"

    def test_cancel(self, client, services):
        _register(client)
        token = services.recovery.request_recovery("a@b.com", "127.0.0.1").token

        assert client.post(f"{API}/recovery/{token}/cancel").status_code == 200
        assert _error_code(client.get(f"{API}/recovery/{token}/question")) == "invalidOrExpiredToken"
