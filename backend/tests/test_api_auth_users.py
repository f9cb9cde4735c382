from app.models.user import UserRole, UserStatus

from conftest import PASSWORD


def test_login_and_me(client, make_user):
    user = make_user(UserRole.manager, username="maria")

    response = client.post("/api/auth/login", json={"username": "maria", "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["id"] == str(user.id)
    assert me.json()["role"] == "manager"


def test_login_by_email(client, make_user):
    make_user(UserRole.tester, username="tess")
    response = client.post("/api/auth/login", json={"username": "tess@backoffice.io", "password": PASSWORD})
    assert response.status_code == 200


def test_wrong_password(client, make_user):
    make_user(UserRole.manager, username="maria")
    response = client.post("/api/auth/login", json={"username": "maria", "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid username or password"}


def test_inactive_user_is_rejected(client, make_user, auth_headers):
    user = make_user(UserRole.junior, status=UserStatus.inactive)

    login = client.post("/api/auth/login", json={"username": user.username, "password": PASSWORD})
    assert login.status_code == 403

    me = client.get("/api/auth/me", headers=auth_headers(user))
    assert me.status_code == 403
    assert me.json() == {"error": "User not found or inactive"}


def test_missing_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code in (401, 403)
    assert "error" in response.json()


def test_login_returns_profile(client, make_user):
    make_user(UserRole.teamlead, username="lead")
    body = client.post("/api/auth/login", json={"username": "lead", "password": PASSWORD}).json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] > 0
    assert body["user"]["role"] == "teamlead"
    assert "hashed_password" not in body["user"]


def test_status_answers_for_inactive_users(client, make_user, auth_headers):
    lead = make_user(UserRole.teamlead)
    junior = make_user(UserRole.junior, team_lead=lead, status=UserStatus.inactive)

    body = client.get("/api/auth/status", headers=auth_headers(junior)).json()

    assert body["authenticated"] is True
    assert body["permissions"] == {"is_active": False, "can_access_teamlead": False, "has_team_lead": True}


def test_refresh(client, make_user, auth_headers):
    user = make_user(UserRole.hr)
    response = client.post("/api/auth/refresh", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_hr_creates_junior(client, make_user, auth_headers):
    hr = make_user(UserRole.hr)
    response = client.post("/api/users", headers=auth_headers(hr), json={
        "username": "newjunior",
        "email": "newjunior@backoffice.io",
        "password": "welcome1",
        "role": "junior",
    })
    assert response.status_code == 200
    assert response.json()["username"] == "newjunior"


def test_hr_cannot_create_admin(client, make_user, auth_headers):
    hr = make_user(UserRole.hr)
    response = client.post("/api/users", headers=auth_headers(hr), json={
        "username": "boss",
        "email": "boss@backoffice.io",
        "password": "welcome1",
        "role": "admin",
    })
    assert response.status_code == 403


def test_short_password_is_a_400(client, make_user, auth_headers):
    admin = make_user(UserRole.admin)
    response = client.post("/api/users", headers=auth_headers(admin), json={
        "username": "short",
        "email": "short@backoffice.io",
        "password": "123",
        "role": "junior",
    })
    assert response.status_code == 400
    assert response.json() == {"error": "password: Password must be at least 6 characters"}


def test_junior_cannot_list_users(client, make_user, auth_headers):
    junior = make_user(UserRole.junior)
    response = client.get("/api/users", headers=auth_headers(junior))
    assert response.status_code == 403
    assert response.json() == {"error": "Not enough permissions"}


def test_teamlead_sees_only_team(client, make_user, auth_headers):
    lead = make_user(UserRole.teamlead)
    mine = make_user(UserRole.junior, team_lead=lead)
    make_user(UserRole.junior)

    response = client.get("/api/users", headers=auth_headers(lead))
    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [str(mine.id)]


def test_change_password(client, make_user, auth_headers):
    user = make_user(UserRole.tester)
    response = client.post("/api/users/change-password", headers=auth_headers(user), json={
        "current_password": PASSWORD,
        "new_password": "another1",
    })
    assert response.status_code == 200

    login = client.post("/api/auth/login", json={"username": user.username, "password": "another1"})
    assert login.status_code == 200
