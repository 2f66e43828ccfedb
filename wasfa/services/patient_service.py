# wasfa/services/patient_service.py
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wasfa.core.tenant_context import TenantContext
from wasfa.models.audit_log import AuditAction, AuditEntityType
from wasfa.models.patient import Patient
from wasfa.schemas.patient import PatientCreate, PatientUpdate
from wasfa.services import audit_service
from wasfa.services.errors import NotFoundError

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = (
    "full_name",
    "date_of_birth",
    "gender",
    "phone",
    "allergies",
    "chronic_diseases",
    "notes",
    "is_archived",
)


def snapshot(patient: Patient) -> dict:
    data = {field: getattr(patient, field) for field in SNAPSHOT_FIELDS}
    if patient.gender is not None:
        data["gender"] = patient.gender.value
    return data


def _tenant_patients(db: Session, tenant_id: UUID):
    return db.query(Patient).filter(Patient.tenant_id == tenant_id, Patient.is_archived.is_(False))


def list_patients(
    db: Session,
    *,
    tenant_id: UUID,
    search: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> list[Patient]:
    """
    Non-archived patients of a tenant, newest first.
    A blank search returns the unfiltered list.
    """
    query = _tenant_patients(db, tenant_id)
    if search and search.strip():
        query = query.filter(Patient.full_name.ilike(f"%{search.strip()}%"))
    query = query.order_by(Patient.created_at.desc()).offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_patient(db: Session, *, tenant_id: UUID, patient_id: UUID) -> Patient:
    patient = _tenant_patients(db, tenant_id).filter(Patient.id == patient_id).first()
    if not patient:
        raise NotFoundError("Patient not found")
    return patient


def create_patient(db: Session, ctx: TenantContext, payload: PatientCreate) -> Patient:
    # tenant_id and created_by always come from the resolved identity
    patient = Patient(
        **payload.model_dump(),
        tenant_id=ctx.tenant.id,
        created_by=ctx.user.id,
    )
    try:
        db.add(patient)
        db.commit()
        db.refresh(patient)
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Patient %s created in tenant %s", patient.id, ctx.tenant.id)
    audit_service.record(
        db,
        ctx,
        AuditAction.CREATE,
        AuditEntityType.PATIENT,
        entity_id=patient.id,
        entity_name=patient.full_name,
        new_data=snapshot(patient),
    )
    return patient


def update_patient(db: Session, ctx: TenantContext, patient_id: UUID, payload: PatientUpdate) -> Patient:
    patient = get_patient(db, tenant_id=ctx.tenant.id, patient_id=patient_id)
    old_data = snapshot(patient)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(patient, field, value)

    try:
        db.commit()
        db.refresh(patient)
    except SQLAlchemyError:
        db.rollback()
        raise

    audit_service.record(
        db,
        ctx,
        AuditAction.UPDATE,
        AuditEntityType.PATIENT,
        entity_id=patient.id,
        entity_name=patient.full_name,
        old_data=old_data,
        new_data=snapshot(patient),
    )
    return patient


def archive_patient(db: Session, ctx: TenantContext, patient_id: UUID) -> None:
    """
    Logical delete: the row stays, but is hidden from listings and search.
    """
    patient = get_patient(db, tenant_id=ctx.tenant.id, patient_id=patient_id)
    old_data = snapshot(patient)
    patient.is_archived = True
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Patient %s archived in tenant %s", patient.id, ctx.tenant.id)
    audit_service.record(
        db,
        ctx,
        AuditAction.DELETE,
        AuditEntityType.PATIENT,
        entity_id=patient.id,
        entity_name=patient.full_name,
        old_data=old_data,
    )
