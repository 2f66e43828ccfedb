from wasfa.utils.token_utils import PasswordResetToken

from conftest import API, login


def test_signup_creates_clinic_admin_with_trial(client, admin_headers):
    response = client.get(f"{API}/auth/me", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "admin@clinic.example.com"
    assert body["role"] == "clinic_admin"
    assert body["tenant"]["name"] == "Clinique Atlas"
    assert body["tenant"]["subscription_status"] == "trial"
    assert body["profile"]["tenant_id"] == body["tenant"]["id"]
    assert all(body["capabilities"].values())
    assert body["subscription"]["can_create_prescription"] is True


def test_signup_duplicate_email_conflicts(client, admin_headers):
    response = client.post(
        f"{API}/auth/signup",
        json={"email": "ADMIN@clinic.example.com", "password": "secret123", "full_name": "Other", "clinic_name": "Other"},
    )
    assert response.status_code == 409


def test_login_rejects_bad_password(client, admin_headers):
    response = client.post(f"{API}/auth/login", data={"username": "admin@clinic.example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_requests_without_token_are_rejected(client):
    assert client.get(f"{API}/auth/me").status_code == 401
    assert client.get(f"{API}/patients", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_login_and_logout_are_audited(client, admin_headers):
    headers = login(client, "admin@clinic.example.com")
    assert client.post(f"{API}/auth/logout", headers=headers).status_code == 204

    logs = client.get(f"{API}/audit-logs", headers=headers).json()["items"]
    actions = [entry["action"] for entry in logs]
    assert "login" in actions
    assert "logout" in actions


def test_forgot_password_is_always_accepted(client, admin_headers, sent_emails):
    unknown = client.post(f"{API}/auth/forgot-password", json={"email": "nobody@clinic.example.com"})
    assert unknown.status_code == 202
    assert sent_emails == []

    known = client.post(f"{API}/auth/forgot-password", json={"email": "admin@clinic.example.com"})
    assert known.status_code == 202
    assert len(sent_emails) == 1
    assert sent_emails[0]["to"] == "admin@clinic.example.com"
    assert "reset-password?token=" in sent_emails[0]["body"]


def test_reset_password_flow(client, db_session, admin_headers):
    client.post(f"{API}/auth/forgot-password", json={"email": "admin@clinic.example.com"})
    token = db_session.query(PasswordResetToken).one().token
    db_session.close()

    response = client.post(f"{API}/auth/reset-password", json={"token": token, "new_password": "brandnew1"})
    assert response.status_code == 200
    login(client, "admin@clinic.example.com", "brandnew1")

    # Tokens are single use
    again = client.post(f"{API}/auth/reset-password", json={"token": token, "new_password": "another1"})
    assert again.status_code == 400


def test_change_password_checks_current_password(client, admin_headers):
    wrong = client.post(
        f"{API}/auth/change-password",
        json={"old_password": "wrong", "new_password": "brandnew1"},
        headers=admin_headers,
    )
    assert wrong.status_code == 400

    ok = client.post(
        f"{API}/auth/change-password",
        json={"old_password": "secret123", "new_password": "brandnew1"},
        headers=admin_headers,
    )
    assert ok.status_code == 200
    login(client, "admin@clinic.example.com", "brandnew1")
