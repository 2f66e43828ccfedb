import os
import tempfile

# Settings are read once at import time, so the environment must be ready first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["FILE_STORAGE_ROOT"] = tempfile.mkdtemp(prefix="wasfa-test-uploads-")
os.environ["EMAIL_BACKEND"] = "smtp"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wasfa.core.database import get_db
from wasfa.main import app
from wasfa.models import registry  # noqa: F401
from wasfa.models.base import Base

API = "/api/v1"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite does not emit BEGIN itself, which breaks SAVEPOINT handling.
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture()
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def sent_emails(monkeypatch):
    outbox = []

    def fake_send_email(to_email, subject, body, **kwargs):
        outbox.append({"to": to_email, "subject": subject, "body": body, **kwargs})

    monkeypatch.setattr("wasfa.notifications.email.base.send_email", fake_send_email)
    return outbox


@pytest.fixture()
def client(db_session, sent_emails):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def login(client, email, password="secret123"):
    response = client.post(f"{API}/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def admin_headers(client):
    response = client.post(
        f"{API}/auth/signup",
        json={
            "email": "admin@clinic.example.com",
            "password": "secret123",
            "full_name": "Sara Admin",
            "clinic_name": "Clinique Atlas",
        },
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def invite(client, admin_headers, email, role, full_name="Team Member"):
    response = client.post(
        f"{API}/users/invite",
        json={"email": email, "password": "secret123", "full_name": full_name, "role": role},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture()
def doctor_headers(client, admin_headers):
    invite(client, admin_headers, "doctor@clinic.example.com", "doctor", full_name="Karim Haddad")
    return login(client, "doctor@clinic.example.com")


@pytest.fixture()
def assistant_headers(client, admin_headers):
    invite(client, admin_headers, "assistant@clinic.example.com", "assistant", full_name="Lina Assistant")
    return login(client, "assistant@clinic.example.com")


@pytest.fixture()
def patient(client, admin_headers):
    response = client.post(
        f"{API}/patients",
        json={"full_name": "Jane Doe", "gender": "female", "date_of_birth": "1990-04-12"},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_prescription(client, headers, patient_id, medications=None, notes=None):
    if medications is None:
        medications = [
            {"medication_name": "Amoxicillin", "dosage": "500mg", "form": "capsule", "frequency": "three_times", "duration": "7 days"}
        ]
    return client.post(
        f"{API}/prescriptions",
        json={"patient_id": patient_id, "notes": notes, "medications": medications},
        headers=headers,
    )
