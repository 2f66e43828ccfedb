from conftest import API, create_prescription

TEMPLATE = {
    "name": "Angine",
    "description": "Adult sore throat",
    "medications": [
        {"medication_name": "Amoxicillin", "dosage": "1g", "form": "tablet", "frequency": "twice_daily", "duration": "6 days"},
        {"medication_name": ""},
        {"medication_name": "Paracetamol", "dosage": "1g", "frequency": "as_needed"},
    ],
}


def test_create_and_apply_template(client, doctor_headers, patient):
    response = client.post(f"{API}/templates", json=TEMPLATE, headers=doctor_headers)
    assert response.status_code == 201, response.text
    template = response.json()
    assert [m["medication_name"] for m in template["medications"]] == ["Amoxicillin", "Paracetamol"]

    lines = client.post(f"{API}/templates/{template['id']}/apply", headers=doctor_headers).json()
    assert lines[0] == {
        "medication_name": "Amoxicillin",
        "dosage": "1g",
        "form": "tablet",
        "frequency": "twice_daily",
        "duration": "6 days",
        "notes": None,
    }

    # Applied lines seed a prescription; editing it leaves the template alone
    lines[0]["dosage"] = "500mg"
    prescription = create_prescription(client, doctor_headers, patient["id"], medications=lines).json()
    assert prescription["medications"][0]["dosage"] == "500mg"
    unchanged = client.get(f"{API}/templates/{template['id']}", headers=doctor_headers).json()
    assert unchanged["medications"][0]["dosage"] == "1g"


def test_template_requires_name_and_medication(client, doctor_headers):
    no_name = client.post(f"{API}/templates", json={**TEMPLATE, "name": "  "}, headers=doctor_headers)
    assert no_name.status_code == 400

    no_lines = client.post(
        f"{API}/templates", json={"name": "Empty", "medications": [{"medication_name": " "}]}, headers=doctor_headers
    )
    assert no_lines.status_code == 400


def test_update_and_delete_template(client, doctor_headers):
    template = client.post(f"{API}/templates", json=TEMPLATE, headers=doctor_headers).json()
    response = client.patch(
        f"{API}/templates/{template['id']}",
        json={"name": "Angine (enfant)", "medications": [{"medication_name": "Amoxicillin syrup", "form": "syrup"}]},
        headers=doctor_headers,
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Angine (enfant)"
    assert [m["medication_name"] for m in response.json()["medications"]] == ["Amoxicillin syrup"]

    assert client.delete(f"{API}/templates/{template['id']}", headers=doctor_headers).status_code == 204
    assert client.get(f"{API}/templates", headers=doctor_headers).json() == []


def test_assistant_reads_but_cannot_write_templates(client, doctor_headers, assistant_headers):
    template = client.post(f"{API}/templates", json=TEMPLATE, headers=doctor_headers).json()

    assert client.post(f"{API}/templates", json=TEMPLATE, headers=assistant_headers).status_code == 403
    assert client.delete(f"{API}/templates/{template['id']}", headers=assistant_headers).status_code == 403
    assert len(client.get(f"{API}/templates", headers=assistant_headers).json()) == 1
