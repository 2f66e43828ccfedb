from uuid import UUID

from wasfa.models.audit_log import AuditLog
from wasfa.services.audit_service import log_audit_event

from conftest import API


def test_patient_changes_are_logged_with_snapshots(client, admin_headers, patient):
    client.patch(f"{API}/patients/{patient['id']}", json={"phone": "0600"}, headers=admin_headers)
    client.delete(f"{API}/patients/{patient['id']}", headers=admin_headers)

    page = client.get(f"{API}/audit-logs", params={"entity_type": "patient"}, headers=admin_headers).json()
    assert page["total"] == 3
    assert [entry["action"] for entry in page["items"]] == ["delete", "update", "create"]

    update = page["items"][1]
    assert update["user_name"] == "Sara Admin"
    assert update["entity_name"] == "Jane Doe"
    assert update["old_data"]["phone"] is None
    assert update["new_data"]["phone"] == "0600"


def test_filters_search_and_paging(client, admin_headers):
    for name in ("Alpha", "Beta", "Gamma"):
        client.post(f"{API}/patients", json={"full_name": name}, headers=admin_headers)

    found = client.get(f"{API}/audit-logs", params={"search": "beta"}, headers=admin_headers).json()
    assert [entry["entity_name"] for entry in found["items"]] == ["Beta"]

    page = client.get(
        f"{API}/audit-logs", params={"action": "create", "page": 2, "page_size": 2}, headers=admin_headers
    ).json()
    assert page["total"] == 3
    assert len(page["items"]) == 1


def test_audit_log_hides_password_values(db_session, client, admin_headers):
    me = client.get(f"{API}/auth/me", headers=admin_headers).json()
    entry = log_audit_event(
        db_session,
        tenant_id=UUID(me["tenant"]["id"]),
        user_id=None,
        user_name="system",
        action="update",
        entity_type="user",
        new_data={"password": "secret123", "email": "x@y.z"},
    )
    assert entry is not None
    assert "secret123" not in entry.new_data
    db_session.close()


def test_recording_failure_is_swallowed(db_session):
    entry = log_audit_event(
        db_session,
        tenant_id=None,
        user_id=None,
        user_name=None,
        action="not-an-action",
        entity_type="patient",
    )
    assert entry is None
    assert db_session.query(AuditLog).count() == 0
    db_session.close()


def test_audit_log_needs_manage_clinic(client, doctor_headers):
    assert client.get(f"{API}/audit-logs", headers=doctor_headers).status_code == 403
