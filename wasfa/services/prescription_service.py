# wasfa/services/prescription_service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from wasfa.core.tenant_context import TenantContext
from wasfa.models.audit_log import AuditAction, AuditEntityType
from wasfa.models.patient import Patient
from wasfa.models.prescription import Prescription, PrescriptionMedication
from wasfa.schemas.prescription import PrescriptionCreate, PrescriptionUpdate
from wasfa.services import audit_service
from wasfa.services.errors import NotFoundError
from wasfa.services.medication_lines import build_lines, clean_lines, line_snapshot
from wasfa.services.subscription_service import ensure_can_create_prescription

logger = logging.getLogger(__name__)


def snapshot(prescription: Prescription) -> dict:
    return {
        "patient_id": str(prescription.patient_id),
        "notes": prescription.notes,
        "medications": [line_snapshot(m) for m in prescription.medications],
    }


def _base_query(db: Session, tenant_id: UUID):
    return (
        db.query(Prescription)
        .options(
            joinedload(Prescription.patient),
            joinedload(Prescription.doctor),
            selectinload(Prescription.medications),
        )
        .filter(Prescription.tenant_id == tenant_id)
    )


def list_prescriptions(
    db: Session,
    *,
    tenant_id: UUID,
    patient_id: Optional[UUID] = None,
    search: Optional[str] = None,
    created_from: Optional[datetime] = None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> list[Prescription]:
    """
    Prescriptions of a tenant, newest first, each with its patient and
    medications (ordered by sort_order).
    """
    query = _base_query(db, tenant_id)
    if patient_id is not None:
        query = query.filter(Prescription.patient_id == patient_id)
    if search and search.strip():
        query = query.join(Prescription.patient).filter(Patient.full_name.ilike(f"%{search.strip()}%"))
    if created_from is not None:
        query = query.filter(Prescription.created_at >= created_from)
    query = query.order_by(Prescription.created_at.desc()).offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_prescription(db: Session, *, tenant_id: UUID, prescription_id: UUID) -> Prescription:
    prescription = _base_query(db, tenant_id).filter(Prescription.id == prescription_id).first()
    if not prescription:
        raise NotFoundError("Prescription not found")
    return prescription


def create_prescription(db: Session, ctx: TenantContext, payload: PrescriptionCreate) -> Prescription:
    """
    Create a prescription and its medication lines in one transaction.

    - Blank medication lines are dropped; none left -> ValidationError
    - Tenant subscription must allow new prescriptions
    - Patient must be a non-archived patient of the same tenant
    """
    lines = clean_lines(payload.medications)
    ensure_can_create_prescription(ctx.tenant)

    patient = (
        db.query(Patient)
        .filter(
            Patient.id == payload.patient_id,
            Patient.tenant_id == ctx.tenant.id,
            Patient.is_archived.is_(False),
        )
        .first()
    )
    if not patient:
        raise NotFoundError("Patient not found")

    prescription = Prescription(
        tenant_id=ctx.tenant.id,
        patient_id=patient.id,
        doctor_id=ctx.profile.id,
        notes=payload.notes,
    )

    try:
        db.add(prescription)
        db.flush()  # assigns prescription.id

        db.add_all(build_lines(PrescriptionMedication, lines, prescription_id=prescription.id))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    prescription = get_prescription(db, tenant_id=ctx.tenant.id, prescription_id=prescription.id)
    logger.info(
        "Prescription %s created for patient %s (%d medications)",
        prescription.id,
        patient.id,
        len(lines),
    )
    audit_service.record(
        db,
        ctx,
        AuditAction.CREATE,
        AuditEntityType.PRESCRIPTION,
        entity_id=prescription.id,
        entity_name=patient.full_name,
        new_data=snapshot(prescription),
    )
    return prescription


def update_prescription(
    db: Session,
    ctx: TenantContext,
    prescription_id: UUID,
    payload: PrescriptionUpdate,
) -> Prescription:
    """
    Partial update. When medications are given they replace the existing
    lines, re-indexed from 0.
    """
    data = payload.model_dump(exclude_unset=True)
    lines = clean_lines(payload.medications) if data.get("medications") is not None else None

    prescription = get_prescription(db, tenant_id=ctx.tenant.id, prescription_id=prescription_id)
    old_data = snapshot(prescription)

    if "notes" in data:
        prescription.notes = data["notes"]

    try:
        if lines is not None:
            prescription.medications.clear()
            db.flush()
            prescription.medications.extend(build_lines(PrescriptionMedication, lines))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    prescription = get_prescription(db, tenant_id=ctx.tenant.id, prescription_id=prescription_id)
    audit_service.record(
        db,
        ctx,
        AuditAction.UPDATE,
        AuditEntityType.PRESCRIPTION,
        entity_id=prescription.id,
        entity_name=prescription.patient.full_name if prescription.patient else None,
        old_data=old_data,
        new_data=snapshot(prescription),
    )
    return prescription


def delete_prescription(db: Session, ctx: TenantContext, prescription_id: UUID) -> None:
    prescription = get_prescription(db, tenant_id=ctx.tenant.id, prescription_id=prescription_id)
    old_data = snapshot(prescription)
    entity_name = prescription.patient.full_name if prescription.patient else None

    try:
        db.delete(prescription)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Prescription %s deleted in tenant %s", prescription_id, ctx.tenant.id)
    audit_service.record(
        db,
        ctx,
        AuditAction.DELETE,
        AuditEntityType.PRESCRIPTION,
        entity_id=prescription_id,
        entity_name=entity_name,
        old_data=old_data,
    )
