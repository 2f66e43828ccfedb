from conftest import API


def test_create_patient_stamps_caller_tenant(client, admin_headers, patient):
    me = client.get(f"{API}/auth/me", headers=admin_headers).json()
    assert patient["tenant_id"] == me["tenant"]["id"]
    assert patient["is_archived"] is False


def test_blank_name_is_rejected(client, admin_headers):
    response = client.post(f"{API}/patients", json={"full_name": "   "}, headers=admin_headers)
    assert response.status_code == 422


def test_list_is_newest_first_and_searchable(client, admin_headers, patient):
    client.post(f"{API}/patients", json={"full_name": "Omar Benali"}, headers=admin_headers)

    names = [p["full_name"] for p in client.get(f"{API}/patients", headers=admin_headers).json()]
    assert names == ["Omar Benali", "Jane Doe"]

    found = client.get(f"{API}/patients", params={"search": "jane"}, headers=admin_headers).json()
    assert [p["full_name"] for p in found] == ["Jane Doe"]


def test_update_patient(client, admin_headers, patient):
    response = client.patch(
        f"{API}/patients/{patient['id']}",
        json={"phone": "+212600000000", "allergies": "Penicillin"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["allergies"] == "Penicillin"
    assert response.json()["full_name"] == "Jane Doe"


def test_archived_patients_are_hidden(client, admin_headers, patient):
    response = client.delete(f"{API}/patients/{patient['id']}", headers=admin_headers)
    assert response.status_code == 204

    assert client.get(f"{API}/patients", headers=admin_headers).json() == []
    assert client.get(f"{API}/patients/{patient['id']}", headers=admin_headers).status_code == 404


def test_assistant_manages_patients(client, assistant_headers):
    response = client.post(f"{API}/patients", json={"full_name": "Walk In"}, headers=assistant_headers)
    assert response.status_code == 201


def test_patients_are_isolated_between_clinics(client, patient):
    response = client.post(
        f"{API}/auth/signup",
        json={"email": "other@other.example.com", "password": "secret123", "full_name": "Other", "clinic_name": "Other"},
    )
    other = {"Authorization": f"Bearer {response.json()['access_token']}"}

    assert client.get(f"{API}/patients", headers=other).json() == []
    assert client.get(f"{API}/patients/{patient['id']}", headers=other).status_code == 404
    assert client.delete(f"{API}/patients/{patient['id']}", headers=other).status_code == 404


def test_create_ignores_supplied_tenant_id(client, admin_headers):
    foreign = "00000000-0000-0000-0000-000000000001"
    response = client.post(
        f"{API}/patients", json={"full_name": "Omar Benali", "tenant_id": foreign}, headers=admin_headers
    )
    assert response.status_code == 201

    me = client.get(f"{API}/auth/me", headers=admin_headers).json()
    assert response.json()["tenant_id"] == me["tenant"]["id"] != foreign


def test_null_name_is_rejected_on_update(client, admin_headers, patient):
    response = client.patch(f"{API}/patients/{patient['id']}", json={"full_name": None}, headers=admin_headers)
    assert response.status_code == 422
    assert client.get(f"{API}/patients/{patient['id']}", headers=admin_headers).json()["full_name"] == "Jane Doe"
