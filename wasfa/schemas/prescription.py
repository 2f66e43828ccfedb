from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from wasfa.models.patient import Gender


class MedicationCreate(BaseModel):
    # Blank names are accepted here and dropped before saving.
    medication_name: str = ""
    dosage: str | None = None
    form: str | None = None
    frequency: str | None = None
    duration: str | None = None
    notes: str | None = None


class MedicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    medication_name: str
    dosage: str | None = None
    form: str | None = None
    frequency: str | None = None
    duration: str | None = None
    notes: str | None = None
    sort_order: int


class PrescriptionCreate(BaseModel):
    patient_id: UUID
    notes: str | None = None
    medications: list[MedicationCreate]


class PrescriptionUpdate(BaseModel):
    notes: str | None = None
    medications: list[MedicationCreate] | None = None


class PrescriptionPatientSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    full_name: str
    date_of_birth: date | None = None
    gender: Gender | None = None


class PrescriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    patient_id: UUID
    doctor_id: UUID
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    patient: PrescriptionPatientSummary | None = None
    medications: list[MedicationResponse] = []


class PrescriptionEmailRequest(BaseModel):
    # Format is checked by the service so a bad address is a 400, not a 422.
    recipient_email: str
    language: str | None = None


class EmailPreviewResponse(BaseModel):
    to: str
    subject: str
    html_content: str
