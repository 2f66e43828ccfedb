import base64

from conftest import API, create_prescription

# 1x1 transparent PNG
PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


def test_update_profile_and_clinic(client, admin_headers):
    profile = client.patch(
        f"{API}/profile", json={"specialty": "Pédiatrie", "license_number": "MA-1234"}, headers=admin_headers
    )
    assert profile.status_code == 200
    assert profile.json()["license_number"] == "MA-1234"

    clinic = client.patch(
        f"{API}/clinic",
        json={"address": "12 Rue Atlas, Rabat", "footer_note": "Urgences: 15"},
        headers=admin_headers,
    )
    assert clinic.status_code == 200
    assert clinic.json()["footer_note"] == "Urgences: 15"
    assert clinic.json()["subscription_status"] == "trial"


def test_required_names_cannot_be_cleared(client, admin_headers):
    assert client.patch(f"{API}/profile", json={"full_name": None}, headers=admin_headers).status_code == 422
    assert client.patch(f"{API}/clinic", json={"name": None}, headers=admin_headers).status_code == 422
    assert client.patch(f"{API}/clinic", json={"name": "  "}, headers=admin_headers).status_code == 422

    me = client.get(f"{API}/auth/me", headers=admin_headers).json()
    assert me["profile"]["full_name"] == "Sara Admin"
    assert me["tenant"]["name"] == "Clinique Atlas"


def test_only_admins_edit_clinic(client, doctor_headers):
    assert client.patch(f"{API}/clinic", json={"name": "Mine now"}, headers=doctor_headers).status_code == 403
    assert client.get(f"{API}/clinic", headers=doctor_headers).status_code == 200


def test_signature_upload_is_served_through_signed_url(client, doctor_headers, patient):
    response = client.post(
        f"{API}/profile/signature", files={"file": ("signature.png", PNG, "image/png")}, headers=doctor_headers
    )
    assert response.status_code == 201, response.text
    body = response.json()
    me = client.get(f"{API}/auth/me", headers=doctor_headers).json()
    assert body["path"].startswith(f"{me['tenant']['id']}/signatures/")
    assert body["path"].endswith(".png")
    assert me["profile"]["signature_url"] == body["path"]

    served = client.get(body["signed_url"])
    assert served.status_code == 200
    assert served.content == PNG
    assert served.headers["content-type"] == "image/png"

    # The signature is embedded in the PDF
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    pdf = client.get(f"{API}/prescriptions/{prescription['id']}/pdf", headers=doctor_headers)
    assert pdf.status_code == 200

    html = client.get(f"{API}/prescriptions/{prescription['id']}/print", headers=doctor_headers).text
    assert f"{API}/storage/files/" in html


def test_upload_rejects_other_file_types(client, doctor_headers):
    response = client.post(
        f"{API}/profile/signature", files={"file": ("notes.txt", b"hello", "text/plain")}, headers=doctor_headers
    )
    assert response.status_code == 400


def test_upload_rejects_non_image_with_image_extension(client, doctor_headers):
    response = client.post(
        f"{API}/profile/signature",
        files={"file": ("signature.png", b"%PDF-1.4 not an image", "image/png")},
        headers=doctor_headers,
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Uploaded file is not a valid image"

    me = client.get(f"{API}/auth/me", headers=doctor_headers).json()
    assert me["profile"]["signature_url"] is None


def test_signed_urls_are_limited_to_own_clinic(client, admin_headers):
    me = client.get(f"{API}/auth/me", headers=admin_headers).json()
    own = client.get(
        f"{API}/storage/signed-url", params={"path": f"{me['tenant']['id']}/logos/1.png"}, headers=admin_headers
    )
    assert own.status_code == 200
    assert own.json()["expires_in"] == 3600
    # Signed but never uploaded
    assert client.get(own.json()["signed_url"]).status_code == 404

    other = client.get(
        f"{API}/storage/signed-url",
        params={"path": "00000000-0000-0000-0000-000000000000/logos/1.png"},
        headers=admin_headers,
    )
    assert other.status_code == 403
    escape = client.get(
        f"{API}/storage/signed-url", params={"path": f"{me['tenant']['id']}/../x.png"}, headers=admin_headers
    )
    assert escape.status_code == 403


def test_bad_storage_token_is_rejected(client):
    assert client.get(f"{API}/storage/files/not-a-token").status_code == 403


def test_unassigned_user_is_forbidden(client, db_session, admin_headers):
    from wasfa.models.profile import Profile

    profile = db_session.query(Profile).one()
    profile.tenant_id = None
    db_session.commit()
    db_session.close()

    response = client.get(f"{API}/patients", headers=admin_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "No tenant assigned to this user"
