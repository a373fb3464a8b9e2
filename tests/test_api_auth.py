from finance_tracker.core.security import create_token, decode_token
from conftest import register_and_login


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "operational", "storage": "memory", "advice": "heuristic"}


def test_register_and_login(client):
    r = client.post("/api/auth/register", json={
        "firstName": "Grace", "lastName": "Hopper", "email": "grace@example.com", "password": "cobol",
    })
    assert r.status_code == 201
    assert r.json() == {"message": "User registered successfully"}

    r = client.post("/api/auth/login", json={"email": "grace@example.com", "password": "cobol"})
    assert r.status_code == 200
    body = r.json()
    assert body["user"] == {"id": 1, "firstName": "Grace", "lastName": "Hopper", "email": "grace@example.com"}
    assert decode_token(body["token"])["email"] == "grace@example.com"


def test_register_requires_all_fields(client):
    r = client.post("/api/auth/register", json={"email": "x@example.com", "password": "pw"})
    assert r.status_code == 400
    assert r.json()["detail"] == "All fields are required"


def test_register_duplicate_email(client):
    register_and_login(client)
    r = client.post("/api/auth/register", json={
        "firstName": "Ada", "lastName": "L", "email": "ada@example.com", "password": "other",
    })
    assert r.status_code == 400
    assert r.json()["detail"] == "User already exists"


def test_login_failures(client):
    register_and_login(client)
    for payload in (
        {"email": "ada@example.com", "password": "wrong"},
        {"email": "nobody@example.com", "password": "s3cret-pass"},
        {},
    ):
        r = client.post("/api/auth/login", json=payload)
        assert r.status_code == 401
        assert r.json()["detail"] == "Invalid credentials"


def test_long_password_round_trips(client):
    password = "p" * 100
    register_and_login(client, email="long@example.com", password=password)


def test_missing_and_bad_tokens(client):
    r = client.get("/api/budget")
    assert r.status_code == 401
    assert r.json()["detail"] == "No token provided"

    r = client.get("/api/budget", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid token"

    expired = create_token(1, "ada@example.com", expires_minutes=-5)
    r = client.get("/api/budget", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401


def test_validate_returns_claims(client, auth_headers):
    r = client.get("/api/auth/validate", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "ada@example.com"


def test_refresh_and_logout(client, auth_headers):
    r = client.post("/auth/refresh", headers=auth_headers)
    assert r.status_code == 200
    assert decode_token(r.json()["token"])["id"] == 1

    r = client.post("/auth/logout", headers=auth_headers)
    assert r.json() == {"message": "Logged out"}


def test_profile_read_and_update(client, auth_headers):
    r = client.get("/auth/profile", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["firstName"] == "Ada"
    assert r.json()["phone"] is None

    r = client.put("/api/profile", headers=auth_headers, json={
        "firstName": "Augusta", "phone": "555-0100", "profilePhoto": "https://img.example/ada.png",
    })
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["firstName"] == "Augusta"
    assert user["lastName"] == "Lovelace"
    assert user["phone"] == "555-0100"
    assert user["profilePhoto"] == "https://img.example/ada.png"

    r = client.get("/auth/profile", headers=auth_headers)
    assert r.json()["firstName"] == "Augusta"


def test_profile_for_unknown_user(client):
    headers = {"Authorization": f"Bearer {create_token(99, 'ghost@example.com')}"}
    assert client.get("/auth/profile", headers=headers).status_code == 404


def test_google_login_creates_user(client, monkeypatch):
    async def fake_profile(access_token):
        assert access_token == "google-access-token"
        return {"email": "lin@example.com", "given_name": "Lin"}

    monkeypatch.setattr("finance_tracker.services.auth.fetch_google_profile", fake_profile)

    r = client.post("/auth/google", json={"token": "google-access-token"})
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["firstName"] == "Lin"
    assert user["lastName"] == "User"

    # Second sign-in reuses the same account
    r = client.post("/api/auth/google-login", json={"token": "google-access-token"})
    assert r.json()["user"]["id"] == user["id"]


def test_google_login_errors(client, monkeypatch):
    r = client.post("/auth/google", json={})
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing Google access token"

    async def rejected(access_token):
        return None

    monkeypatch.setattr("finance_tracker.services.auth.fetch_google_profile", rejected)
    r = client.post("/auth/google", json={"token": "bad"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid Google token"

    async def no_email(access_token):
        return {"given_name": "Anon"}

    monkeypatch.setattr("finance_tracker.services.auth.fetch_google_profile", no_email)
    r = client.post("/auth/google", json={"token": "ok"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Unable to retrieve Google user email"


def test_malformed_json_is_bad_request(client):
    r = client.post("/api/auth/login", content="{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid request payload"
