# wasfa/api/v1/endpoints/audit_logs.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext
from wasfa.dependencies.authz import require_capability
from wasfa.schemas.audit import AuditLogPage, AuditLogResponse
from wasfa.services.audit_service import list_audit_logs, load_snapshot
from wasfa.services.permission_service import MANAGE_CLINIC

router = APIRouter()


@router.get("", response_model=AuditLogPage)
def read_audit_logs(
    action: Optional[str] = Query(None, description="create, update, delete, login, logout, export, print or all"),
    entity_type: Optional[str] = Query(None, description="patient, prescription, template, user, settings or all"),
    search: Optional[str] = Query(None, description="Matches user name or entity name"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_CLINIC)),
) -> AuditLogPage:
    items, total = list_audit_logs(
        db,
        tenant_id=ctx.tenant.id,
        action=action,
        entity_type=entity_type,
        search=search,
        page=page,
        page_size=page_size,
    )
    return AuditLogPage(
        items=[
            AuditLogResponse(
                id=entry.id,
                user_id=entry.user_id,
                user_name=entry.user_name,
                action=entry.action,
                entity_type=entry.entity_type,
                entity_id=entry.entity_id,
                entity_name=entry.entity_name,
                old_data=load_snapshot(entry.old_data),
                new_data=load_snapshot(entry.new_data),
                created_at=entry.created_at,
            )
            for entry in items
        ],
        total=total,
        page=page,
        page_size=page_size,
    )
