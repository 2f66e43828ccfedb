from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wasfa.models.tenant import SubscriptionStatus
from wasfa.models.user_role import RoleName
from wasfa.schemas.subscription import SubscriptionInfo


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID | None = None
    full_name: str
    specialty: str | None = None
    license_number: str | None = None
    phone: str | None = None
    signature_url: str | None = None
    avatar_url: str | None = None


class ProfileUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    specialty: str | None = None
    license_number: str | None = None
    phone: str | None = None

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Full name cannot be empty")
        return v.strip()


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    address: str | None = None
    phone: str | None = None
    logo_url: str | None = None
    footer_note: str | None = None
    subscription_status: SubscriptionStatus
    trial_ends_at: datetime | None = None


class TenantUpdate(BaseModel):
    # Subscription fields are not client-writable.
    name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = None
    phone: str | None = None
    footer_note: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Clinic name cannot be empty")
        return v.strip()


class CurrentUserResponse(BaseModel):
    id: UUID
    email: str
    profile: ProfileResponse | None = None
    tenant: TenantResponse | None = None
    roles: list[RoleName]
    role: RoleName | None = None
    capabilities: dict[str, bool]
    subscription: SubscriptionInfo | None = None


class AssetUploadResponse(BaseModel):
    path: str
    signed_url: str


class SignedUrlResponse(BaseModel):
    signed_url: str
    expires_in: int
