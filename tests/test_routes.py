# tests/test_routes.py
# HTTP surface exercised through FastAPI's TestClient

from app.utils import constants

from conftest import PASSWORD

REGISTER_URL = "/api/v1/auth/register"


def register(client, **overrides):
    payload = {
        "user_type": "PERSON",
        "user_firstname": "Alice",
        "user_lastname": "Mbarga",
        "email": "alice@example.com",
        "password": PASSWORD,
        "occupation": "Engineer",
    }
    payload.update(overrides)
    return client.post(REGISTER_URL, json=payload)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_register_and_me(client):
    response = register(client)
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == constants.REGISTRATION_SUCCESS_MESSAGE
    assert body["token_type"] == "bearer"
    assert body["expires_in"] == 3600

    me = client.get("/api/v1/auth/me", headers=bearer(body["token"]))
    assert me.status_code == 200
    assert me.json()["email"] == "alice@example.com"
    assert me.json()["occupation"] == "Engineer"


def test_register_conflict(client):
    register(client)
    response = register(client)
    assert response.status_code == 409
    assert response.json()["detail"] == constants.USER_ALREADY_EXISTS_MESSAGE


def test_register_missing_identifier(client):
    response = register(client, email=None)
    assert response.status_code == 400
    assert response.json()["detail"] == constants.EMAIL_OR_CONTACT_REQUIRED_MESSAGE


def test_register_rejects_short_password_and_bad_type(client):
    assert register(client, password="short").status_code == 422
    assert register(client, user_type="ROBOT").status_code == 422
    assert register(client, contact="abc").status_code == 422


def test_login(client):
    register(client)
    ok = client.post("/api/v1/auth/login", json={"identifier": "alice@example.com", "password": PASSWORD})
    assert ok.status_code == 200
    assert ok.json()["token"]

    wrong = client.post("/api/v1/auth/login", json={"identifier": "alice@example.com", "password": "nope-nope"})
    assert wrong.status_code == 401
    assert wrong.json()["detail"] == constants.INVALID_PASSWORD_MESSAGE

    unknown = client.post("/api/v1/auth/login", json={"identifier": "bob@example.com", "password": PASSWORD})
    assert unknown.status_code == 404


def test_protected_route_token_errors(client):
    missing = client.get("/api/v1/auth/me")
    assert missing.status_code == 401
    assert missing.json()["detail"] == constants.MISSING_TOKEN_MESSAGE

    malformed = client.get("/api/v1/auth/me", headers=bearer("garbage"))
    assert malformed.status_code == 400
    assert malformed.json()["detail"] == constants.MALFORMED_TOKEN_MESSAGE


def test_two_factor_endpoints(client, two_factor):
    token = register(client).json()["token"]

    setup = client.post("/api/v1/auth/2fa/enable", headers=bearer(token))
    assert setup.status_code == 200
    secret = setup.json()["secret"]

    first = client.post("/api/v1/auth/login", json={"identifier": "alice@example.com", "password": PASSWORD})
    assert first.json()["two_factor_required"] is True
    assert first.json()["token"] is None

    bad = client.post("/api/v1/auth/2fa/verify", json={"identifier": "alice@example.com", "code": "ZZZZZZZZ"})
    assert bad.status_code == 401
    assert bad.json()["detail"] == constants.INVALID_TWO_FA_CODE

    good = client.post(
        "/api/v1/auth/2fa/verify",
        json={"identifier": "alice@example.com", "code": two_factor.generate_code(secret)},
    )
    assert good.status_code == 200
    assert good.json()["token"]

    disabled = client.post("/api/v1/auth/2fa/disable", headers=bearer(token))
    assert disabled.json()["message"] == constants.TWO_FA_DISABLED_SUCCESS


def test_password_reset_endpoints(client, notifier):
    register(client)
    requested = client.post("/api/v1/auth/password-reset/request", json={"email": "alice@example.com"})
    assert requested.status_code == 200
    assert requested.json()["message"] == constants.PASSWORD_RESET_EMAIL_SENT

    confirmed = client.post(
        "/api/v1/auth/password-reset/confirm",
        json={"token": notifier.last_token, "new_password": "Brand-New-Pass1"},
    )
    assert confirmed.status_code == 200

    reused = client.post(
        "/api/v1/auth/password-reset/confirm",
        json={"token": notifier.last_token, "new_password": "Brand-New-Pass2"},
    )
    assert reused.status_code == 400
    assert reused.json()["detail"] == constants.INVALID_OR_EXPIRED_TOKEN


def test_logout(client):
    token = register(client).json()["token"]
    response = client.post("/api/v1/auth/logout", headers=bearer(token))
    assert response.status_code == 200
    assert response.json()["message"] == constants.LOGOUT_SUCCESS_MESSAGE


def test_user_listings(client):
    token = register(client).json()["token"]
    register(
        client,
        user_type="ORGANIZATION",
        email="contact@acme.com",
        occupation=None,
        location="Douala",
    )

    assert len(client.get("/api/v1/users", headers=bearer(token)).json()) == 2
    persons = client.get("/api/v1/users/persons", headers=bearer(token)).json()
    organizations = client.get("/api/v1/users/organizations", headers=bearer(token)).json()
    assert [p["occupation"] for p in persons] == ["Engineer"]
    assert [o["location"] for o in organizations] == ["Douala"]


def test_update_own_profile(client):
    body = register(client).json()
    user_id = body["user_response_dto"]["user_id"]

    response = client.put(
        f"/api/v1/users/{user_id}/profile",
        json={"description": "Feedback enthusiast"},
        headers=bearer(body["token"]),
    )
    assert response.status_code == 200
    assert response.json()["user_response_dto"]["description"] == "Feedback enthusiast"


def test_cannot_update_someone_elses_profile(client):
    alice = register(client).json()
    bob = register(client, email="bob@example.com").json()

    response = client.put(
        f"/api/v1/users/{alice['user_response_dto']['user_id']}/profile",
        json={"description": "hijacked"},
        headers=bearer(bob["token"]),
    )
    assert response.status_code == 403


def test_mixed_case_email_over_http(client):
    assert register(client, email="Alice@Example.COM").status_code == 201
    response = client.post("/api/v1/auth/login", json={"identifier": "Alice@Example.COM", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["user_response_dto"]["email"] == "alice@example.com"


def test_api_handlers_run_in_threadpool():
    import inspect

    import main

    endpoints = [route.endpoint for route in main.app.routes if getattr(route, "path", "").startswith("/api")]
    assert endpoints
    assert not any(inspect.iscoroutinefunction(endpoint) for endpoint in endpoints)
