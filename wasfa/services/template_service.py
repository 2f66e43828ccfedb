# wasfa/services/template_service.py
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from wasfa.core.tenant_context import TenantContext
from wasfa.models.audit_log import AuditAction, AuditEntityType
from wasfa.models.template import PrescriptionTemplate, TemplateMedication
from wasfa.schemas.prescription import MedicationCreate
from wasfa.schemas.template import TemplateCreate, TemplateUpdate
from wasfa.services import audit_service
from wasfa.services.errors import NotFoundError, ValidationError
from wasfa.services.medication_lines import LINE_FIELDS, build_lines, clean_lines, line_snapshot

logger = logging.getLogger(__name__)


def snapshot(template: PrescriptionTemplate) -> dict:
    return {
        "name": template.name,
        "description": template.description,
        "medications": [line_snapshot(m) for m in template.medications],
    }


def _clean_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Template name is required")
    return name


def list_templates(db: Session, *, tenant_id: UUID) -> list[PrescriptionTemplate]:
    return (
        db.query(PrescriptionTemplate)
        .options(selectinload(PrescriptionTemplate.medications))
        .filter(PrescriptionTemplate.tenant_id == tenant_id)
        .order_by(PrescriptionTemplate.created_at.desc())
        .all()
    )


def get_template(db: Session, *, tenant_id: UUID, template_id: UUID) -> PrescriptionTemplate:
    template = (
        db.query(PrescriptionTemplate)
        .options(selectinload(PrescriptionTemplate.medications))
        .filter(PrescriptionTemplate.id == template_id, PrescriptionTemplate.tenant_id == tenant_id)
        .first()
    )
    if not template:
        raise NotFoundError("Template not found")
    return template


def create_template(db: Session, ctx: TenantContext, payload: TemplateCreate) -> PrescriptionTemplate:
    name = _clean_name(payload.name)
    lines = clean_lines(payload.medications)

    template = PrescriptionTemplate(
        tenant_id=ctx.tenant.id,
        created_by=ctx.user.id,
        name=name,
        description=payload.description,
    )
    try:
        db.add(template)
        db.flush()

        db.add_all(build_lines(TemplateMedication, lines, template_id=template.id))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    template = get_template(db, tenant_id=ctx.tenant.id, template_id=template.id)
    logger.info("Template %s created in tenant %s", template.id, ctx.tenant.id)
    audit_service.record(
        db,
        ctx,
        AuditAction.CREATE,
        AuditEntityType.TEMPLATE,
        entity_id=template.id,
        entity_name=template.name,
        new_data=snapshot(template),
    )
    return template


def update_template(
    db: Session,
    ctx: TenantContext,
    template_id: UUID,
    payload: TemplateUpdate,
) -> PrescriptionTemplate:
    data = payload.model_dump(exclude_unset=True)
    name = _clean_name(data["name"]) if "name" in data else None
    lines = clean_lines(payload.medications) if data.get("medications") is not None else None

    template = get_template(db, tenant_id=ctx.tenant.id, template_id=template_id)
    old_data = snapshot(template)

    if name is not None:
        template.name = name
    if "description" in data:
        template.description = data["description"]

    try:
        if lines is not None:
            template.medications.clear()
            db.flush()
            template.medications.extend(build_lines(TemplateMedication, lines))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    template = get_template(db, tenant_id=ctx.tenant.id, template_id=template_id)
    audit_service.record(
        db,
        ctx,
        AuditAction.UPDATE,
        AuditEntityType.TEMPLATE,
        entity_id=template.id,
        entity_name=template.name,
        old_data=old_data,
        new_data=snapshot(template),
    )
    return template


def delete_template(db: Session, ctx: TenantContext, template_id: UUID) -> None:
    template = get_template(db, tenant_id=ctx.tenant.id, template_id=template_id)
    old_data = snapshot(template)
    name = template.name

    try:
        db.delete(template)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    audit_service.record(
        db,
        ctx,
        AuditAction.DELETE,
        AuditEntityType.TEMPLATE,
        entity_id=template_id,
        entity_name=name,
        old_data=old_data,
    )


def apply_template(db: Session, *, tenant_id: UUID, template_id: UUID) -> list[MedicationCreate]:
    """
    Copy a template's lines by value, ready to seed a new prescription.
    Nothing links the copies back to the template.
    """
    template = get_template(db, tenant_id=tenant_id, template_id=template_id)
    return [
        MedicationCreate(**{field: getattr(line, field) for field in LINE_FIELDS})
        for line in template.medications
    ]
