# wasfa/services/audit_service.py
"""
Best-effort audit trail.

log_audit_event() writes a single row inside a SAVEPOINT so an entry is either
fully recorded or not at all. It must be called after the primary operation
has been committed, and it never raises: failures are logged and swallowed.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from wasfa.models.audit_log import AuditAction, AuditEntityType, AuditLog

logger = logging.getLogger(__name__)

REDACT_KEYS = {"password", "hashed_password", "token", "access_token"}


def _sanitize(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: ("***" if k.lower() in REDACT_KEYS else _sanitize(v)) for k, v in data.items()}
    if isinstance(data, list):
        return [_sanitize(v) for v in data]
    return data


def _dump(data: Any) -> Optional[str]:
    if data is None:
        return None
    return json.dumps(_sanitize(data), default=str, ensure_ascii=False)


def log_audit_event(
    db: Session,
    *,
    tenant_id: UUID,
    user_id: UUID | None,
    user_name: str | None,
    action: AuditAction | str,
    entity_type: AuditEntityType | str,
    entity_id: Any = None,
    entity_name: str | None = None,
    old_data: Any = None,
    new_data: Any = None,
) -> Optional[AuditLog]:
    """
    Record one audit entry. Returns the row, or None if recording failed.
    """
    try:
        action = AuditAction(action).value
        entity_type = AuditEntityType(entity_type).value
        with db.begin_nested():
            entry = AuditLog(
                tenant_id=tenant_id,
                user_id=user_id,
                user_name=user_name,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                entity_name=entity_name[:255] if entity_name else None,
                old_data=_dump(old_data),
                new_data=_dump(new_data),
            )
            db.add(entry)
            db.flush()
        db.commit()
        return entry
    except Exception as e:
        logger.warning(
            "[AUDIT LOG ERROR] Failed to record %s/%s: %s", action, entity_type, e, exc_info=True
        )
        try:
            db.rollback()
        except Exception:
            logger.warning("[AUDIT LOG ERROR] Rollback after audit failure also failed", exc_info=True)
        return None


def record(
    db: Session,
    ctx,
    action: AuditAction | str,
    entity_type: AuditEntityType | str,
    entity_id: Any = None,
    entity_name: str | None = None,
    old_data: Any = None,
    new_data: Any = None,
) -> Optional[AuditLog]:
    """
    log_audit_event() for the acting principal of a tenant context.
    """
    return log_audit_event(
        db,
        tenant_id=ctx.tenant.id,
        user_id=ctx.user.id,
        user_name=ctx.display_name,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_name=entity_name,
        old_data=old_data,
        new_data=new_data,
    )


def list_audit_logs(
    db: Session,
    *,
    tenant_id: UUID,
    action: str | None = None,
    entity_type: str | None = None,
    search: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[AuditLog], int]:
    """
    Newest-first page of a tenant's audit log plus the total matching count.
    """
    query = db.query(AuditLog).filter(AuditLog.tenant_id == tenant_id)

    if action and action != "all":
        query = query.filter(AuditLog.action == action)
    if entity_type and entity_type != "all":
        query = query.filter(AuditLog.entity_type == entity_type)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(AuditLog.user_name.ilike(term), AuditLog.entity_name.ilike(term)))

    total = query.count()
    items = (
        query.order_by(AuditLog.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


def load_snapshot(raw: str | None) -> Any:
    """
    Decode a stored JSON snapshot; undecodable legacy values are returned raw.
    """
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return raw
