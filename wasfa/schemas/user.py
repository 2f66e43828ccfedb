from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from wasfa.models.user_role import RoleName


class InviteUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1, max_length=255)
    role: RoleName


class RoleUpdateRequest(BaseModel):
    role: RoleName


class TeamMemberResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    specialty: str | None = None
    roles: list[RoleName]
    role: RoleName | None = None
