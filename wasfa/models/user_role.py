# wasfa/models/user_role.py
import uuid
from enum import Enum as PyEnum

from sqlalchemy import Enum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from wasfa.models.base import Base


class RoleName(str, PyEnum):
    SUPER_ADMIN = "super_admin"
    CLINIC_ADMIN = "clinic_admin"
    DOCTOR = "doctor"
    ASSISTANT = "assistant"


class UserRole(Base):
    """
    (user_id, role) pair. A principal may hold several rows.
    """

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[RoleName] = mapped_column(
        Enum(RoleName, name="app_role_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
