from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class FavoriteMedicationCreate(BaseModel):
    medication_name: str
    dosage: str | None = None
    form: str | None = None
    frequency: str | None = None
    duration: str | None = None

    @field_validator("medication_name")
    @classmethod
    def validate_medication_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Medication name is required")
        return v


class FavoriteMedicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    medication_name: str
    dosage: str | None = None
    form: str | None = None
    frequency: str | None = None
    duration: str | None = None
    created_at: datetime | None = None
