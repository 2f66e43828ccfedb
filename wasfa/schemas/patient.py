from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from wasfa.models.patient import Gender


class PatientBase(BaseModel):
    full_name: str
    date_of_birth: date | None = None
    gender: Gender | None = None
    phone: str | None = None
    allergies: str | None = None
    chronic_diseases: str | None = None
    notes: str | None = None


class PatientCreate(PatientBase):
    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name is required")
        return v


class PatientUpdate(BaseModel):
    full_name: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    phone: str | None = None
    allergies: str | None = None
    chronic_diseases: str | None = None
    notes: str | None = None

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str | None) -> str:
        # Omitting the field keeps the stored name; an explicit null is rejected.
        if v is None:
            raise ValueError("Full name cannot be empty")
        v = v.strip()
        if not v:
            raise ValueError("Full name cannot be empty")
        return v


class PatientResponse(PatientBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    is_archived: bool
    created_at: datetime
    updated_at: datetime
