# wasfa/models/prescription.py
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wasfa.models.base import Base
from wasfa.models.patient import Patient
from wasfa.models.profile import Profile
from wasfa.utils.datetime_utils import utc_now


class Prescription(Base):
    __tablename__ = "prescriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id"),
        nullable=False,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utc_now,
    )

    patient: Mapped["Patient"] = relationship("Patient")
    doctor: Mapped["Profile"] = relationship("Profile")
    medications: Mapped[list["PrescriptionMedication"]] = relationship(
        "PrescriptionMedication",
        back_populates="prescription",
        cascade="all, delete-orphan",
        order_by="PrescriptionMedication.sort_order",
    )


class PrescriptionMedication(Base):
    __tablename__ = "prescription_medications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    prescription_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("prescriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    medication_name: Mapped[str] = mapped_column(String(255), nullable=False)
    dosage: Mapped[str | None] = mapped_column(String(100), nullable=True)     # e.g. "500mg"
    form: Mapped[str | None] = mapped_column(String(50), nullable=True)        # e.g. "tablet"
    frequency: Mapped[str | None] = mapped_column(String(100), nullable=True)  # e.g. "twice_daily"
    duration: Mapped[str | None] = mapped_column(String(100), nullable=True)   # e.g. "7 days"
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    prescription: Mapped["Prescription"] = relationship("Prescription", back_populates="medications")
