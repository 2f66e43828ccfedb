# wasfa/api/v1/endpoints/templates.py
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext, get_tenant_context
from wasfa.dependencies.authz import require_capability
from wasfa.schemas.prescription import MedicationCreate
from wasfa.schemas.template import TemplateCreate, TemplateResponse, TemplateUpdate
from wasfa.services import template_service
from wasfa.services.errors import NotFoundError, ValidationError
from wasfa.services.permission_service import MANAGE_TEMPLATES

router = APIRouter()


@router.get("", response_model=list[TemplateResponse])
def list_templates(
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> list[TemplateResponse]:
    return template_service.list_templates(db, tenant_id=ctx.tenant.id)


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
def create_template(
    payload: TemplateCreate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_TEMPLATES)),
) -> TemplateResponse:
    try:
        return template_service.create_template(db, ctx, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/{template_id}", response_model=TemplateResponse)
def get_template(
    template_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> TemplateResponse:
    try:
        return template_service.get_template(db, tenant_id=ctx.tenant.id, template_id=template_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.patch("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: UUID,
    payload: TemplateUpdate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_TEMPLATES)),
) -> TemplateResponse:
    try:
        return template_service.update_template(db, ctx, template_id, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_template(
    template_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_TEMPLATES)),
) -> Response:
    try:
        template_service.delete_template(db, ctx, template_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{template_id}/apply", response_model=list[MedicationCreate])
def apply_template(
    template_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> list[MedicationCreate]:
    """
    Medication lines copied from the template, to seed a new prescription.
    """
    try:
        return template_service.apply_template(db, tenant_id=ctx.tenant.id, template_id=template_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
