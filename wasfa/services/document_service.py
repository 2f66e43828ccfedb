# wasfa/services/document_service.py
"""
Prescription documents: print view (HTML), PDF export and email.

build_document() assembles the localized content once; the renderers in
wasfa.utils only lay it out.
"""

import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from wasfa.core.config import get_settings
from wasfa.core.tenant_context import TenantContext
from wasfa.models.audit_log import AuditAction, AuditEntityType
from wasfa.models.prescription import Prescription
from wasfa.notifications.email.base import send_email_safely
from wasfa.services import audit_service
from wasfa.services.errors import PermissionDeniedError, RenderError, ValidationError
from wasfa.services.profile_service import create_signed_url
from wasfa.utils import file_storage
from wasfa.utils.email_templates import EMAIL_FALLBACK_LANGUAGE, render_prescription_email
from wasfa.utils.labels import DOCUMENT, FORM, FREQUENCY, format_long_date, label, normalize_language, text_direction
from wasfa.utils.prescription_html import render_prescription_html
from wasfa.utils.prescription_pdf import generate_prescription_pdf

logger = logging.getLogger(__name__)

settings = get_settings()

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DOCUMENT_LABEL_KEYS = (
    "patient",
    "date_of_birth",
    "medications",
    "medication_name",
    "dosage",
    "form",
    "frequency",
    "duration",
    "notes",
    "signature",
)


def doctor_display_name(name: str, language: str) -> str:
    prefix = label(DOCUMENT, "doctor_prefix", language)
    if not name or name.startswith(prefix):
        return name
    return f"{prefix} {name}"


def build_document(ctx: TenantContext, prescription: Prescription, language: str) -> dict:
    """
    Everything the renderers need, already localized.

    The doctor block comes from the prescribing doctor's profile,
    falling back to the caller's own profile.
    """
    doctor = prescription.doctor or ctx.profile
    tenant = ctx.tenant
    patient = prescription.patient

    license_line = ""
    if doctor.license_number:
        license_line = f"{label(DOCUMENT, 'license_number', language)}: {doctor.license_number}"

    return {
        "language": language,
        "direction": text_direction(language),
        "title": f"{label(DOCUMENT, 'title', language)} - {patient.full_name if patient else ''}",
        "doctor_name": doctor_display_name(doctor.full_name, language),
        "specialty": doctor.specialty or "",
        "license_line": license_line,
        "clinic_line": " - ".join(part for part in (tenant.name, tenant.address, tenant.phone) if part),
        "date": format_long_date(prescription.created_at, language),
        "patient_name": patient.full_name if patient else "",
        "date_of_birth": format_long_date(patient.date_of_birth, language) if patient and patient.date_of_birth else "",
        "labels": {key: label(DOCUMENT, key, language) for key in DOCUMENT_LABEL_KEYS},
        "medications": [
            {
                "index": index,
                "medication_name": med.medication_name,
                "dosage": med.dosage or "-",
                "form": label(FORM, med.form, language) or "-",
                "frequency": label(FREQUENCY, med.frequency, language) or "-",
                "duration": med.duration or "-",
            }
            for index, med in enumerate(prescription.medications, start=1)
        ],
        "notes": prescription.notes or "",
        "footer_note": tenant.footer_note or "",
        "signature_path": doctor.signature_url,
        "logo_path": tenant.logo_url,
    }


def _audit(db: Session, ctx: TenantContext, action: AuditAction, prescription: Prescription, **extra) -> None:
    audit_service.record(
        db,
        ctx,
        action,
        AuditEntityType.PRESCRIPTION,
        entity_id=prescription.id,
        entity_name=prescription.patient.full_name if prescription.patient else None,
        new_data=extra or None,
    )


def render_print_html(db: Session, ctx: TenantContext, prescription: Prescription, language: Optional[str]) -> str:
    language = normalize_language(language, settings.default_language)
    document = build_document(ctx, prescription, language)

    logo_url = create_signed_url(document["logo_path"]) if document["logo_path"] else None
    signature_url = create_signed_url(document["signature_path"]) if document["signature_path"] else None
    html = render_prescription_html(document, logo_url=logo_url, signature_url=signature_url)

    _audit(db, ctx, AuditAction.PRINT, prescription, language=language)
    return html


def _load_asset(path: Optional[str]) -> Optional[bytes]:
    if not path:
        return None
    try:
        return file_storage.read_storage_file(path)
    except (OSError, ValueError, PermissionDeniedError) as exc:
        raise RenderError("Could not load an image (logo or signature) for the document") from exc


def _generate_pdf(ctx: TenantContext, prescription: Prescription, language: str) -> tuple[bytes, str]:
    document = build_document(ctx, prescription, language)

    logo = _load_asset(document["logo_path"])
    signature = _load_asset(document["signature_path"])
    try:
        pdf = generate_prescription_pdf(document, logo=logo, signature=signature).getvalue()
    except (OSError, ValueError) as exc:
        logger.warning("PDF rendering failed for prescription %s: %s", prescription.id, exc, exc_info=True)
        raise RenderError("Could not render the prescription PDF") from exc

    patient_part = re.sub(r"[^\w-]+", "_", document["patient_name"]).strip("_") or "patient"
    return pdf, f"prescription_{patient_part}_{prescription.created_at:%Y-%m-%d}.pdf"


def render_pdf(db: Session, ctx: TenantContext, prescription: Prescription, language: Optional[str]) -> tuple[bytes, str]:
    """
    Returns (pdf_bytes, filename). Nothing is persisted.
    Raises RenderError when an embedded image cannot be loaded or drawn.
    """
    language = normalize_language(language, settings.default_language)
    pdf, filename = _generate_pdf(ctx, prescription, language)

    _audit(db, ctx, AuditAction.EXPORT, prescription, format="pdf", language=language)
    return pdf, filename


def send_prescription_email(
    db: Session,
    ctx: TenantContext,
    prescription: Prescription,
    recipient_email: str,
    language: Optional[str],
) -> dict:
    """
    Build the prescription email and hand it to the mail backend.

    Unknown languages fall back to French. Delivery failures are logged and
    do not change the returned preview.
    """
    recipient_email = (recipient_email or "").strip()
    if not EMAIL_RE.match(recipient_email):
        raise ValidationError("Invalid email format")
    if not prescription.medications:
        raise ValidationError("Medications must be a non-empty list")

    language = normalize_language(language, EMAIL_FALLBACK_LANGUAGE)
    doctor = prescription.doctor or ctx.profile
    subject, html = render_prescription_email(
        language=language,
        patient_name=prescription.patient.full_name if prescription.patient else "",
        doctor_name=doctor_display_name(doctor.full_name, language),
        clinic_name=ctx.tenant.name,
        prescription_date=format_long_date(prescription.created_at, language),
        medications=[
            {
                "medication_name": m.medication_name,
                "dosage": m.dosage,
                "frequency": label(FREQUENCY, m.frequency, language),
                "duration": m.duration,
            }
            for m in prescription.medications
        ],
    )

    # The PDF goes along as an attachment; the email is still sent without it
    # when rendering fails.
    attachments = None
    try:
        pdf, filename = _generate_pdf(ctx, prescription, language)
        attachments = [{"filename": filename, "content": pdf, "mime_type": "application/pdf"}]
    except RenderError as exc:
        logger.warning("Prescription %s emailed without its PDF: %s", prescription.id, exc)

    sent = send_email_safely(
        recipient_email, subject, html, reason="prescription", html=True, attachments=attachments
    )

    logger.info(
        "Prescription %s email prepared (%d medications, sent=%s) by %s",
        prescription.id,
        len(prescription.medications),
        sent,
        ctx.user.id,
    )
    _audit(db, ctx, AuditAction.EXPORT, prescription, format="email", language=language)
    return {"to": recipient_email, "subject": subject, "html_content": html}
