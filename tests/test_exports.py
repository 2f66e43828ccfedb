import json

from wasfa.services.export_service import CSV_BOM

from conftest import API, create_prescription


def test_empty_export_is_404(client, admin_headers):
    for export_type in ("prescriptions", "patients", "statistics"):
        response = client.get(f"{API}/exports/{export_type}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "No data to export"


def test_prescriptions_csv(client, doctor_headers, patient):
    create_prescription(client, doctor_headers, patient["id"], notes="Rest, fluids")
    response = client.get(f"{API}/exports/prescriptions", params={"format": "csv"}, headers=doctor_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="prescriptions_' in response.headers["content-disposition"]

    text = response.content.decode("utf-8")
    assert text.startswith(CSV_BOM)
    header, row = text[len(CSV_BOM):].split("\n")
    assert header == "id,patient_name,notes,medications_count,medications,created_at"
    assert ',Jane Doe,"Rest, fluids",1,Amoxicillin,' in row


def test_patients_json(client, admin_headers, patient):
    response = client.get(
        f"{API}/exports/patients", params={"format": "json", "date_range": "today"}, headers=admin_headers
    )
    assert response.status_code == 200
    rows = json.loads(response.content)
    assert rows[0]["full_name"] == "Jane Doe"
    assert rows[0]["gender"] == "female"
    assert rows[0]["date_of_birth"] == "1990-04-12"


def test_statistics_export(client, doctor_headers, patient):
    create_prescription(client, doctor_headers, patient["id"])
    rows = json.loads(
        client.get(f"{API}/exports/statistics", params={"format": "json"}, headers=doctor_headers).content
    )
    metrics = {row["metric"]: row["value"] for row in rows}
    assert metrics["Total Prescriptions"] == 1
    assert metrics["Total Patients"] == 1
    assert metrics["Female Patients"] == 1
    assert metrics["Average Medications per Prescription"] == "1.00"
    assert metrics["Medication: Amoxicillin"] == 1


def test_export_is_audited(client, admin_headers, patient):
    client.get(f"{API}/exports/patients", headers=admin_headers)
    page = client.get(f"{API}/audit-logs", params={"action": "export"}, headers=admin_headers).json()
    assert page["total"] == 1
    assert page["items"][0]["new_data"]["rows"] == 1


def test_invalid_parameters_and_permissions(client, admin_headers, assistant_headers):
    assert client.get(f"{API}/exports/invoices", headers=admin_headers).status_code == 422
    assert client.get(f"{API}/exports/patients", params={"format": "xml"}, headers=admin_headers).status_code == 422
    assert client.get(f"{API}/exports/patients", headers=assistant_headers).status_code == 403
