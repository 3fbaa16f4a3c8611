from __future__ import annotations

from fastapi.testclient import TestClient

from app import main

ACCOUNT = {
    "fullName": "Jane Doe Twelve Chars",
    "email": "a@x.com",
    "password": "secret1",
    "role": "CLIENT",
}


def test_account_lifecycle_scenario(api_client):
    client, _ = api_client

    created = client.post("/api/users", json=ACCOUNT)
    assert created.status_code == 201
    body = created.json()
    account_id = body["id"]
    assert body["email"] == "a@x.com"
    assert "password" not in body
    assert "passwordHash" not in body

    duplicate = client.post("/api/users", json={**ACCOUNT, "email": "A@X.com"})
    assert duplicate.status_code == 409
    assert "A@X.com" in duplicate.json()["error"]

    ok = client.post("/api/users/login", json={"email": "a@x.com", "password": "secret1"})
    assert ok.status_code == 200
    assert ok.json()["id"] == account_id

    bad = client.post("/api/users/login", json={"email": "a@x.com", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "invalid credentials"

    recovered = client.get("/api/users/recover/a@x.com")
    assert recovered.status_code == 200
    assert recovered.headers["content-type"].startswith("text/plain")
    temporary = recovered.text
    assert len(temporary) == 8

    assert client.post("/api/users/login", json={"email": "a@x.com", "password": temporary}).status_code == 200
    assert client.post("/api/users/login", json={"email": "a@x.com", "password": "secret1"}).status_code == 401

    assert client.delete(f"/api/users/{account_id}").status_code == 204
    missing = client.get(f"/api/users/{account_id}")
    assert missing.status_code == 404
    assert missing.json()["path"] == f"/api/users/{account_id}"


def test_login_for_unknown_email_matches_bad_password(api_client):
    client, _ = api_client
    client.post("/api/users", json=ACCOUNT)

    unknown = client.post("/api/users/login", json={"email": "ghost@x.com", "password": "secret1"})
    wrong = client.post("/api/users/login", json={"email": "a@x.com", "password": "nope"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json()["error"] == wrong.json()["error"]


def test_validation_errors_list_every_field(api_client):
    client, _ = api_client

    response = client.post(
        "/api/users",
        json={"fullName": "short", "email": "nope", "role": "ROOT", "phone": "12"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == 400
    assert body["timestamp"]
    assert set(body["errores"]) == {"fullName", "email", "role", "phone", "password"}


def test_malformed_payload_types_use_error_shape(api_client):
    client, _ = api_client

    response = client.post("/api/users", json={**ACCOUNT, "registerDate": "not-a-date"})

    assert response.status_code == 400
    assert "registerDate" in response.json()["errores"]


def test_register_stamps_today(api_client):
    client, _ = api_client

    response = client.post("/api/users/register", json={**ACCOUNT, "registerDate": "2001-01-01"})

    assert response.status_code == 201
    assert response.json()["registerDate"] != "2001-01-01"


def test_lookup_by_email_and_role(api_client):
    client, _ = api_client
    client.post("/api/users", json=ACCOUNT)
    client.post("/api/users", json={**ACCOUNT, "email": "lib@x.com", "role": "LIBRARIAN"})

    by_email = client.get("/api/users/email/A@X.COM")
    assert by_email.status_code == 200
    assert by_email.json()["email"] == "a@x.com"
    assert client.get("/api/users/email/ghost@x.com").status_code == 404

    by_role = client.get("/api/users/role/LIBRARIAN")
    assert by_role.status_code == 200
    assert [item["email"] for item in by_role.json()] == ["lib@x.com"]
    assert client.get("/api/users/role/ADMIN").status_code == 204

    listing = client.get("/api/users")
    assert [item["email"] for item in listing.json()] == ["a@x.com", "lib@x.com"]


def test_update_and_profile_routes(api_client):
    client, _ = api_client
    account_id = client.post("/api/users", json=ACCOUNT).json()["id"]
    client.post("/api/users", json={**ACCOUNT, "email": "b@x.com"})

    conflict = client.put(f"/api/users/{account_id}", json={**ACCOUNT, "email": "B@x.com"})
    assert conflict.status_code == 409

    updated = client.put(
        f"/api/users/{account_id}",
        json={**ACCOUNT, "fullName": "Jane Doe Renamed Here", "phone": "5551234567"},
    )
    assert updated.status_code == 200
    assert updated.json()["fullName"] == "Jane Doe Renamed Here"
    assert updated.json()["phone"] == "5551234567"

    assert client.put("/api/users/999", json=ACCOUNT).status_code == 404

    profile = client.put(
        f"/api/users/profile/{account_id}",
        json={"fullName": "Jane Profile Changed", "password": "newpass9"},
    )
    assert profile.status_code == 200
    assert profile.json()["role"] == "CLIENT"
    assert client.post("/api/users/login", json={"email": "a@x.com", "password": "newpass9"}).status_code == 200

    assert client.put("/api/users/profile/999", json={"fullName": "Nobody Really Here"}).status_code == 404


def test_ids_beyond_bigint_range_are_rejected_as_bad_requests(api_client):
    client, _ = api_client
    too_large = 2**63

    missing = client.get(f"/api/users/{too_large}")
    assert missing.status_code == 400
    assert "account_id" in missing.json()["errores"]
    assert client.delete(f"/api/users/{too_large}").status_code == 400
    assert client.put(f"/api/users/{too_large}", json=ACCOUNT).status_code == 400
    assert client.put(
        f"/api/users/profile/{too_large}", json={"fullName": "Nobody Really Here"}
    ).status_code == 400
    assert client.get(f"/api/users/{2**63 - 1}").status_code == 404


def test_recover_unknown_email_returns_404(api_client):
    client, _ = api_client

    response = client.get("/api/users/recover/ghost@x.com")

    assert response.status_code == 404
    assert "ghost@x.com" in response.json()["error"]


def test_login_is_rate_limited_per_email(api_client):
    client, _ = api_client
    client.post("/api/users", json=ACCOUNT)
    payload = {"email": "a@x.com", "password": "wrong"}

    statuses = [client.post("/api/users/login", json=payload).status_code for _ in range(4)]

    assert statuses == [401, 401, 401, 429]
    assert client.post("/api/users/login", json={"email": "b@x.com", "password": "x"}).status_code == 401


def test_successful_login_resets_throttle(api_client):
    client, _ = api_client
    client.post("/api/users", json=ACCOUNT)
    wrong = {"email": "a@x.com", "password": "wrong"}
    right = {"email": "a@x.com", "password": "secret1"}

    client.post("/api/users/login", json=wrong)
    client.post("/api/users/login", json=wrong)
    assert client.post("/api/users/login", json=right).status_code == 200
    assert client.post("/api/users/login", json=wrong).status_code == 401
    assert client.post("/api/users/login", json=wrong).status_code == 401


def test_healthz_and_metrics_are_served():
    client = TestClient(main.app)

    assert client.get("/healthz").json() == {"status": "ok"}
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "library_login_attempts_total" in metrics.text
