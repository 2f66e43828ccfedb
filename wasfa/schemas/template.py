from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from wasfa.schemas.prescription import MedicationCreate, MedicationResponse


class TemplateCreate(BaseModel):
    name: str
    description: str | None = None
    medications: list[MedicationCreate]


class TemplateUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    medications: list[MedicationCreate] | None = None


class TemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    created_by: UUID | None = None
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime
    medications: list[MedicationResponse] = []
