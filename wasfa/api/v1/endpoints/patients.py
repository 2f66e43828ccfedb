# wasfa/api/v1/endpoints/patients.py
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext, get_tenant_context
from wasfa.dependencies.authz import require_capability
from wasfa.schemas.patient import PatientCreate, PatientResponse, PatientUpdate
from wasfa.schemas.prescription import PrescriptionResponse
from wasfa.services import patient_service, prescription_service
from wasfa.services.errors import NotFoundError
from wasfa.services.permission_service import MANAGE_PATIENTS

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[PatientResponse])
def list_patients(
    search: Optional[str] = Query(None, description="Case-insensitive match on full name"),
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> list[PatientResponse]:
    """
    Non-archived patients of the caller's clinic, newest first.
    """
    return patient_service.list_patients(
        db, tenant_id=ctx.tenant.id, search=search, offset=offset, limit=limit
    )


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(
    payload: PatientCreate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_PATIENTS)),
) -> PatientResponse:
    return patient_service.create_patient(db, ctx, payload)


@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> PatientResponse:
    try:
        return patient_service.get_patient(db, tenant_id=ctx.tenant.id, patient_id=patient_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.patch("/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: UUID,
    payload: PatientUpdate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_PATIENTS)),
) -> PatientResponse:
    try:
        return patient_service.update_patient(db, ctx, patient_id, payload)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def archive_patient(
    patient_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_PATIENTS)),
) -> Response:
    """
    Archive the patient. The record is kept but no longer listed.
    """
    try:
        patient_service.archive_patient(db, ctx, patient_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{patient_id}/prescriptions", response_model=list[PrescriptionResponse])
def list_patient_prescriptions(
    patient_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> list[PrescriptionResponse]:
    try:
        patient = patient_service.get_patient(db, tenant_id=ctx.tenant.id, patient_id=patient_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return prescription_service.list_prescriptions(db, tenant_id=ctx.tenant.id, patient_id=patient.id)
