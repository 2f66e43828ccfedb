# wasfa/models/profile.py
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wasfa.models.base import Base
from wasfa.models.tenant import Tenant
from wasfa.models.user import User
from wasfa.utils.datetime_utils import utc_now


class Profile(Base):
    """
    Clinic-facing identity of a principal.

    - id is the principal (users.id).
    - tenant_id NULL means the principal is not assigned to any clinic.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tenant_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    specialty: Mapped[str | None] = mapped_column(String(255), nullable=True)
    license_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    signature_url: Mapped[str | None] = mapped_column(String(500), nullable=True)  # storage path
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)  # storage path

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now,
    )

    user: Mapped["User"] = relationship("User")
    tenant: Mapped["Tenant | None"] = relationship("Tenant")
