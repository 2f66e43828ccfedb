# wasfa/api/v1/endpoints/prescriptions.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext, get_tenant_context
from wasfa.dependencies.authz import require_capability
from wasfa.models.prescription import Prescription
from wasfa.schemas.prescription import (
    EmailPreviewResponse,
    PrescriptionCreate,
    PrescriptionEmailRequest,
    PrescriptionResponse,
    PrescriptionUpdate,
)
from wasfa.services import document_service, prescription_service
from wasfa.services.errors import NotFoundError, RenderError, SubscriptionInactiveError, ValidationError
from wasfa.services.permission_service import CREATE_PRESCRIPTION

router = APIRouter()
logger = logging.getLogger(__name__)


def _load(db: Session, ctx: TenantContext, prescription_id: UUID) -> Prescription:
    try:
        return prescription_service.get_prescription(db, tenant_id=ctx.tenant.id, prescription_id=prescription_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("", response_model=list[PrescriptionResponse])
def list_prescriptions(
    patient_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive match on patient name"),
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> list[PrescriptionResponse]:
    return prescription_service.list_prescriptions(
        db,
        tenant_id=ctx.tenant.id,
        patient_id=patient_id,
        search=search,
        offset=offset,
        limit=limit,
    )


@router.post("", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
def create_prescription(
    payload: PrescriptionCreate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(CREATE_PRESCRIPTION)),
) -> PrescriptionResponse:
    """
    Create a prescription with its medication lines.

    - 400 when no line has a medication name
    - 402 when the clinic subscription does not allow new prescriptions
    - 404 when the patient is not in this clinic
    """
    try:
        return prescription_service.create_prescription(db, ctx, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SubscriptionInactiveError as exc:
        raise HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/{prescription_id}", response_model=PrescriptionResponse)
def get_prescription(
    prescription_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> PrescriptionResponse:
    return _load(db, ctx, prescription_id)


@router.patch("/{prescription_id}", response_model=PrescriptionResponse)
def update_prescription(
    prescription_id: UUID,
    payload: PrescriptionUpdate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(CREATE_PRESCRIPTION)),
) -> PrescriptionResponse:
    try:
        return prescription_service.update_prescription(db, ctx, prescription_id, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{prescription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_prescription(
    prescription_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(CREATE_PRESCRIPTION)),
) -> Response:
    try:
        prescription_service.delete_prescription(db, ctx, prescription_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{prescription_id}/print", response_class=HTMLResponse)
def print_prescription(
    prescription_id: UUID,
    language: Optional[str] = Query(None, description="ar, fr or en"),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> HTMLResponse:
    prescription = _load(db, ctx, prescription_id)
    return HTMLResponse(document_service.render_print_html(db, ctx, prescription, language))


@router.get("/{prescription_id}/pdf")
def download_prescription_pdf(
    prescription_id: UUID,
    language: Optional[str] = Query(None, description="ar, fr or en"),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> Response:
    prescription = _load(db, ctx, prescription_id)
    try:
        pdf, filename = document_service.render_pdf(db, ctx, prescription, language)
    except RenderError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{prescription_id}/email", response_model=EmailPreviewResponse)
def email_prescription(
    prescription_id: UUID,
    payload: PrescriptionEmailRequest,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> EmailPreviewResponse:
    prescription = _load(db, ctx, prescription_id)
    try:
        preview = document_service.send_prescription_email(
            db, ctx, prescription, payload.recipient_email, payload.language
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return EmailPreviewResponse(**preview)
