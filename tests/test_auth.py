from mayspace.models.user import User


def test_register_user(client, db_session):
    response = client.post("/user/register", json={
        "name": "Maria Santos",
        "username": "maria",
        "email": "Maria@Example.com",
        "contactNumber": "09171234567",
        "password": "secret123",
    })
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["username"] == "maria"
    assert user["email"] == "maria@example.com"
    assert "password" not in user

    stored = db_session.query(User).filter(User.username == "maria").one()
    assert stored.password != "secret123"
    assert stored.password.startswith("$2")


def test_register_missing_fields(client):
    response = client.post("/user/register", json={"username": "maria"})
    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Missing or invalid fields"
    assert any(err["field"] == "email" for err in body["errors"])


def test_register_duplicate_username(client, make_user):
    make_user("maria")
    response = client.post("/user/register", json={
        "name": "Other",
        "username": "maria",
        "email": "other@example.com",
        "contactNumber": "0917",
        "password": "x",
    })
    assert response.status_code == 409
    assert response.json()["message"] == "Username or email already exists"


def test_register_duplicate_email(client, make_user):
    make_user("maria")
    response = client.post("/user/register", json={
        "name": "Other",
        "username": "other",
        "email": "maria@example.com",
        "contactNumber": "0917",
        "password": "x",
    })
    assert response.status_code == 409


def test_login_with_username_or_email(client, make_user):
    user_id = make_user("maria", password="secret123")

    by_username = client.post("/user/login", json={"username": "maria", "password": "secret123"})
    assert by_username.status_code == 200
    assert by_username.json()["user"]["id"] == user_id

    by_email = client.post("/user/login", json={"username": "maria@example.com", "password": "secret123"})
    assert by_email.status_code == 200
    assert by_email.json()["user"]["id"] == user_id


def test_login_invalid(client, make_user):
    make_user("maria", password="secret123")

    wrong_password = client.post("/user/login", json={"username": "maria", "password": "nope"})
    unknown_user = client.post("/user/login", json={"username": "ghost", "password": "secret123"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    # Same message either way
    assert wrong_password.json() == unknown_user.json()


def test_admin_register_and_login(client, make_admin):
    admin_id = make_admin("root", password="adminpass")
    response = client.post("/admin/login", json={"username": "root", "password": "adminpass"})
    assert response.status_code == 200
    assert response.json()["admin"]["id"] == admin_id


def test_user_credentials_do_not_log_into_admin(client, make_user):
    make_user("maria", password="secret123")
    response = client.post("/admin/login", json={"username": "maria", "password": "secret123"})
    assert response.status_code == 401


def test_missing_identity_header(client):
    response = client.get("/units")
    assert response.status_code == 401


def test_unknown_identity_header(client):
    response = client.get("/units", headers={"X-User-ID": "999"})
    assert response.status_code == 401
    response = client.get("/units", headers={"X-User-ID": "abc"})
    assert response.status_code == 401


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "operational"
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["database"] == "connected"


def test_register_rejects_malformed_email(client, db_session):
    for email in ("not an@email", "missing-at.example.com", "maria@"):
        response = client.post("/user/register", json={
            "name": "Maria",
            "username": "maria",
            "email": email,
            "contactNumber": "0917",
            "password": "secret123",
        })
        assert response.status_code == 400, email
        assert any(err["field"] == "email" for err in response.json()["errors"])
    assert db_session.query(User).count() == 0


def test_password_reset_rejects_malformed_email(client):
    assert client.post("/api/auth/forgot-password", json={"email": "nope"}).status_code == 400
    response = client.post("/api/auth/reset-password", json={
        "email": "not an@email", "otp": "123456", "newPassword": "x",
    })
    assert response.status_code == 400
