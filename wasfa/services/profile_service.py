# wasfa/services/profile_service.py
"""
The caller's own profile, clinic settings and their image assets.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wasfa.core.config import get_settings
from wasfa.core.security import create_storage_token, decode_storage_token
from wasfa.core.tenant_context import TenantContext
from wasfa.models.audit_log import AuditAction, AuditEntityType
from wasfa.models.profile import Profile
from wasfa.models.tenant import Tenant
from wasfa.schemas.profile import ProfileUpdate, TenantUpdate
from wasfa.services import audit_service
from wasfa.services.errors import NotFoundError
from wasfa.utils import file_storage

logger = logging.getLogger(__name__)

settings = get_settings()

PROFILE_FIELDS = ("full_name", "specialty", "license_number", "phone", "signature_url")
CLINIC_FIELDS = ("name", "address", "phone", "footer_note", "logo_url")


def _snapshot(obj, fields) -> dict:
    return {field: getattr(obj, field) for field in fields}


def _commit(db: Session, obj) -> None:
    try:
        db.commit()
        db.refresh(obj)
    except SQLAlchemyError:
        db.rollback()
        raise


def update_profile(db: Session, ctx: TenantContext, payload: ProfileUpdate) -> Profile:
    profile = ctx.profile
    old_data = _snapshot(profile, PROFILE_FIELDS)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    _commit(db, profile)

    audit_service.record(
        db,
        ctx,
        AuditAction.UPDATE,
        AuditEntityType.SETTINGS,
        entity_id=profile.id,
        entity_name=profile.full_name,
        old_data=old_data,
        new_data=_snapshot(profile, PROFILE_FIELDS),
    )
    return profile


def update_clinic(db: Session, ctx: TenantContext, payload: TenantUpdate) -> Tenant:
    tenant = ctx.tenant
    old_data = _snapshot(tenant, CLINIC_FIELDS)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(tenant, field, value)
    _commit(db, tenant)

    audit_service.record(
        db,
        ctx,
        AuditAction.UPDATE,
        AuditEntityType.SETTINGS,
        entity_id=tenant.id,
        entity_name=tenant.name,
        old_data=old_data,
        new_data=_snapshot(tenant, CLINIC_FIELDS),
    )
    return tenant


def upload_signature(db: Session, ctx: TenantContext, filename: str | None, data: bytes) -> str:
    """Store the doctor's signature image; only its storage path is persisted."""
    path = file_storage.save_tenant_asset(ctx.tenant.id, file_storage.SIGNATURES, filename, data)
    old_path = ctx.profile.signature_url
    ctx.profile.signature_url = path
    _commit(db, ctx.profile)

    audit_service.record(
        db,
        ctx,
        AuditAction.UPDATE,
        AuditEntityType.SETTINGS,
        entity_id=ctx.profile.id,
        entity_name=ctx.profile.full_name,
        old_data={"signature_url": old_path},
        new_data={"signature_url": path},
    )
    return path


def upload_logo(db: Session, ctx: TenantContext, filename: str | None, data: bytes) -> str:
    path = file_storage.save_tenant_asset(ctx.tenant.id, file_storage.LOGOS, filename, data)
    old_path = ctx.tenant.logo_url
    ctx.tenant.logo_url = path
    _commit(db, ctx.tenant)

    audit_service.record(
        db,
        ctx,
        AuditAction.UPDATE,
        AuditEntityType.SETTINGS,
        entity_id=ctx.tenant.id,
        entity_name=ctx.tenant.name,
        old_data={"logo_url": old_path},
        new_data={"logo_url": path},
    )
    return path


def create_signed_url(storage_path: str) -> str:
    """Relative URL serving storage_path for SIGNED_URL_EXPIRE_SECONDS."""
    token = create_storage_token(storage_path, settings.signed_url_expire_seconds)
    return f"{settings.api_v1_prefix}/storage/files/{token}"


def sign_tenant_path(ctx: TenantContext, storage_path: str) -> str:
    return create_signed_url(file_storage.ensure_tenant_path(storage_path, ctx.tenant.id))


def read_signed_file(token: str) -> tuple[bytes, str]:
    """
    Resolve a signed token to file content and media type.
    Raises ValueError for a bad or expired token, NotFoundError for a missing file.
    """
    path = decode_storage_token(token)
    try:
        data = file_storage.read_storage_file(path)
    except FileNotFoundError as exc:
        raise NotFoundError("File not found") from exc
    return data, file_storage.guess_media_type(path)
