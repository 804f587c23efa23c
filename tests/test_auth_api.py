def test_register_returns_token_and_hides_password(register_user):
    registered = register_user()
    user = registered["user"]
    assert registered["token"]
    assert user["username"] == "alice"
    assert "password" not in user


def test_register_rejects_short_password(client, database):
    resp = client.post("/api/auth/register", json={
        "username": "alice", "email": "alice@example.com", "password": "123",
    })
    assert resp.status_code == 400
    body = resp.json()
    assert body["status"] == "error"
    assert body["message"] == "Failed to register user"
    assert body["error"]["fields"][0]["field"] == "password"
    assert database["user"].count_documents({}) == 0


def test_register_duplicate_email(client, database, alice):
    resp = client.post("/api/auth/register", json={
        "username": "alice2", "email": "ALICE@example.com", "password": "secret1",
    })
    assert resp.status_code == 400
    assert database["user"].count_documents({}) == 1


def test_login(client, alice):
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret1"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["token"]
    assert "password" not in body["data"]["user"]


def test_login_wrong_password(client, alice):
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401
    assert resp.json()["status"] == "error"


def test_me(client, alice):
    resp = client.get("/api/auth/me", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["id"] == alice["user"]["id"]


def test_me_with_garbage_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
    assert resp.status_code == 401
    assert resp.json()["status"] == "error"


def test_token_for_deleted_user(client, alice, database):
    database["user"].delete_one({"_id": alice["user"]["id"]})
    resp = client.get("/api/auth/me", headers=alice["headers"])
    assert resp.status_code == 401
