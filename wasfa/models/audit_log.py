# wasfa/models/audit_log.py
import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from wasfa.models.base import Base
from wasfa.utils.datetime_utils import utc_now


class AuditAction(str, PyEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"
    EXPORT = "export"
    PRINT = "print"


class AuditEntityType(str, PyEnum):
    PATIENT = "patient"
    PRESCRIPTION = "prescription"
    TEMPLATE = "template"
    USER = "user"
    SETTINGS = "settings"


class AuditLog(Base):
    """
    Append-only record of a significant action.

    Rows are never updated or deleted by the application.
    """

    __tablename__ = "audit_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        doc="NULL for system-originated events",
    )
    user_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    entity_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    entity_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    old_data: Mapped[str | None] = mapped_column(Text, nullable=True, doc="JSON snapshot of old values")
    new_data: Mapped[str | None] = mapped_column(Text, nullable=True, doc="JSON snapshot of new values")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )
