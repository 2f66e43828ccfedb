from conftest import API, create_prescription


def test_jane_doe_amoxicillin_end_to_end(client, doctor_headers, patient, sent_emails):
    response = create_prescription(
        client,
        doctor_headers,
        patient["id"],
        medications=[
            {"medication_name": "Amoxicillin", "dosage": "500mg", "form": "capsule", "frequency": "three_times", "duration": "7 days"},
            {"medication_name": "   "},
        ],
        notes="Take with food",
    )
    assert response.status_code == 201, response.text
    prescription = response.json()
    assert prescription["patient"]["full_name"] == "Jane Doe"
    assert [m["medication_name"] for m in prescription["medications"]] == ["Amoxicillin"]
    assert prescription["medications"][0]["sort_order"] == 0

    me = client.get(f"{API}/auth/me", headers=doctor_headers).json()
    assert prescription["doctor_id"] == me["id"]
    assert prescription["tenant_id"] == me["tenant"]["id"]

    listed = client.get(f"{API}/patients/{patient['id']}/prescriptions", headers=doctor_headers).json()
    assert [p["id"] for p in listed] == [prescription["id"]]

    html = client.get(f"{API}/prescriptions/{prescription['id']}/print", params={"language": "fr"}, headers=doctor_headers)
    assert html.status_code == 200
    assert 'lang="fr"' in html.text
    assert "Ordonnance médicale" in html.text
    assert "Amoxicillin" in html.text
    assert "Capsule" in html.text
    assert "Trois fois par jour" in html.text
    assert "Dr. Karim Haddad" in html.text

    pdf = client.get(f"{API}/prescriptions/{prescription['id']}/pdf", params={"language": "en"}, headers=doctor_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")
    assert "prescription_Jane_Doe_" in pdf.headers["content-disposition"]

    email = client.post(
        f"{API}/prescriptions/{prescription['id']}/email",
        json={"recipient_email": "jane@example.com", "language": "en"},
        headers=doctor_headers,
    )
    assert email.status_code == 200
    assert email.json()["subject"] == "Medical Prescription - Jane Doe"
    assert sent_emails[-1]["to"] == "jane@example.com"
    attachment = sent_emails[-1]["attachments"][0]
    assert attachment["filename"].endswith(".pdf")
    assert attachment["content"].startswith(b"%PDF")


def test_prescription_without_named_medication_is_rejected(client, doctor_headers, patient):
    response = create_prescription(client, doctor_headers, patient["id"], medications=[{"medication_name": " "}])
    assert response.status_code == 400
    assert response.json()["detail"] == "At least one medication is required"
    assert client.get(f"{API}/prescriptions", headers=doctor_headers).json() == []


def test_assistant_cannot_prescribe(client, assistant_headers, patient):
    response = create_prescription(client, assistant_headers, patient["id"])
    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions. Required: create_prescription"

    # but can still read
    assert client.get(f"{API}/prescriptions", headers=assistant_headers).status_code == 200


def test_prescription_for_unknown_patient_is_404(client, doctor_headers):
    response = create_prescription(client, doctor_headers, "00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


def test_update_replaces_medication_lines(client, doctor_headers, patient):
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    response = client.patch(
        f"{API}/prescriptions/{prescription['id']}",
        json={"notes": "Updated", "medications": [{"medication_name": "Ibuprofen"}, {"medication_name": "Paracetamol"}]},
        headers=doctor_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["notes"] == "Updated"
    assert [(m["medication_name"], m["sort_order"]) for m in body["medications"]] == [
        ("Ibuprofen", 0),
        ("Paracetamol", 1),
    ]


def test_delete_prescription(client, doctor_headers, patient):
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    assert client.delete(f"{API}/prescriptions/{prescription['id']}", headers=doctor_headers).status_code == 204
    assert client.get(f"{API}/prescriptions/{prescription['id']}", headers=doctor_headers).status_code == 404


def test_search_by_patient_name(client, doctor_headers, patient):
    create_prescription(client, doctor_headers, patient["id"])
    assert len(client.get(f"{API}/prescriptions", params={"search": "doe"}, headers=doctor_headers).json()) == 1
    assert client.get(f"{API}/prescriptions", params={"search": "smith"}, headers=doctor_headers).json() == []


def test_email_validation(client, doctor_headers, patient, sent_emails):
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    url = f"{API}/prescriptions/{prescription['id']}/email"

    bad = client.post(url, json={"recipient_email": "not-an-email"}, headers=doctor_headers)
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid email format"
    assert sent_emails == []


def test_email_language_falls_back_to_french(client, doctor_headers, patient):
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    response = client.post(
        f"{API}/prescriptions/{prescription['id']}/email",
        json={"recipient_email": "jane@example.com", "language": "de"},
        headers=doctor_headers,
    )
    assert response.status_code == 200
    assert response.json()["subject"] == "Ordonnance médicale - Jane Doe"


def test_email_delivery_failure_still_returns_preview(client, doctor_headers, patient, monkeypatch):
    def broken(*args, **kwargs):
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr("wasfa.notifications.email.base.send_email", broken)
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    response = client.post(
        f"{API}/prescriptions/{prescription['id']}/email",
        json={"recipient_email": "jane@example.com"},
        headers=doctor_headers,
    )
    assert response.status_code == 200


def test_arabic_print_is_right_to_left(client, doctor_headers, patient):
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    html = client.get(f"{API}/prescriptions/{prescription['id']}/print", params={"language": "ar"}, headers=doctor_headers)
    assert 'dir="rtl"' in html.text
    assert "وصفة طبية" in html.text


def test_print_and_pdf_are_audited(client, admin_headers, doctor_headers, patient):
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    client.get(f"{API}/prescriptions/{prescription['id']}/print", headers=doctor_headers)
    client.get(f"{API}/prescriptions/{prescription['id']}/pdf", headers=doctor_headers)

    page = client.get(f"{API}/audit-logs", params={"entity_type": "prescription"}, headers=admin_headers).json()
    actions = {entry["action"] for entry in page["items"]}
    assert {"create", "print", "export"} <= actions


def test_arabic_pdf_renders(client, doctor_headers, patient):
    prescription = create_prescription(client, doctor_headers, patient["id"]).json()
    pdf = client.get(f"{API}/prescriptions/{prescription['id']}/pdf", params={"language": "ar"}, headers=doctor_headers)
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")
