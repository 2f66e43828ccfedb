from conftest import API, invite, login


def test_invite_lists_member_with_role(client, admin_headers):
    member = invite(client, admin_headers, "doctor@clinic.example.com", "doctor", full_name="Karim Haddad")
    assert member["role"] == "doctor"
    assert member["roles"] == ["doctor"]

    team = client.get(f"{API}/users", headers=admin_headers).json()
    assert {m["email"]: m["role"] for m in team} == {
        "admin@clinic.example.com": "clinic_admin",
        "doctor@clinic.example.com": "doctor",
    }


def test_invite_duplicate_email_conflicts(client, admin_headers):
    invite(client, admin_headers, "doctor@clinic.example.com", "doctor")
    response = client.post(
        f"{API}/users/invite",
        json={"email": "doctor@clinic.example.com", "password": "secret123", "full_name": "Again", "role": "assistant"},
        headers=admin_headers,
    )
    assert response.status_code == 409


def test_clinic_admin_cannot_grant_super_admin(client, admin_headers):
    response = client.post(
        f"{API}/users/invite",
        json={"email": "root@clinic.example.com", "password": "secret123", "full_name": "Root", "role": "super_admin"},
        headers=admin_headers,
    )
    assert response.status_code == 403


def test_change_role_replaces_all_roles(client, admin_headers):
    member = invite(client, admin_headers, "assistant@clinic.example.com", "assistant")
    response = client.patch(f"{API}/users/{member['id']}/role", json={"role": "doctor"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["roles"] == ["doctor"]

    # Takes effect on the member's next request
    headers = login(client, "assistant@clinic.example.com")
    caps = client.get(f"{API}/auth/me", headers=headers).json()["capabilities"]
    assert caps["create_prescription"] is True


def test_admin_cannot_change_own_role_or_remove_self(client, admin_headers):
    me = client.get(f"{API}/auth/me", headers=admin_headers).json()
    assert client.patch(f"{API}/users/{me['id']}/role", json={"role": "doctor"}, headers=admin_headers).status_code == 400
    assert client.delete(f"{API}/users/{me['id']}", headers=admin_headers).status_code == 400


def test_removed_member_loses_clinic_access(client, admin_headers):
    member = invite(client, admin_headers, "doctor@clinic.example.com", "doctor")
    headers = login(client, "doctor@clinic.example.com")

    assert client.delete(f"{API}/users/{member['id']}", headers=admin_headers).status_code == 204

    me = client.get(f"{API}/auth/me", headers=headers).json()
    assert me["tenant"] is None
    assert me["roles"] == []
    assert not any(me["capabilities"].values())
    assert client.get(f"{API}/patients", headers=headers).status_code == 403
    assert client.get(f"{API}/users", headers=admin_headers).json()[-1]["email"] == "admin@clinic.example.com"


def test_team_management_needs_manage_clinic(client, doctor_headers):
    response = client.get(f"{API}/users", headers=doctor_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions. Required: manage_clinic"


def test_clinic_admin_cannot_demote_or_remove_super_admin(client, db_session, admin_headers):
    from uuid import UUID

    from wasfa.models.user_role import RoleName
    from wasfa.services.user_role_service import replace_user_role

    member = invite(client, admin_headers, "root@clinic.example.com", "doctor", full_name="Root")
    replace_user_role(db_session, UUID(member["id"]), RoleName.SUPER_ADMIN)
    db_session.commit()
    db_session.close()

    demote = client.patch(f"{API}/users/{member['id']}/role", json={"role": "assistant"}, headers=admin_headers)
    assert demote.status_code == 403
    assert client.delete(f"{API}/users/{member['id']}", headers=admin_headers).status_code == 403

    team = {m["email"]: m["roles"] for m in client.get(f"{API}/users", headers=admin_headers).json()}
    assert team["root@clinic.example.com"] == ["super_admin"]
