# wasfa/api/v1/endpoints/exports.py
import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext
from wasfa.dependencies.authz import require_capability
from wasfa.models.audit_log import AuditAction, AuditEntityType
from wasfa.services import audit_service
from wasfa.services.errors import NotFoundError, ValidationError
from wasfa.services.export_service import build_export
from wasfa.services.permission_service import VIEW_STATISTICS

router = APIRouter()
logger = logging.getLogger(__name__)

# Audit entity recorded for each report type.
EXPORT_ENTITY = {
    "prescriptions": AuditEntityType.PRESCRIPTION,
    "patients": AuditEntityType.PATIENT,
    "statistics": AuditEntityType.SETTINGS,
}


@router.get("/{export_type}")
def export_report(
    export_type: Literal["prescriptions", "patients", "statistics"],
    format: Literal["csv", "json"] = Query("csv"),
    date_range: Literal["all", "today", "week", "month", "year"] = Query("all"),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(VIEW_STATISTICS)),
) -> Response:
    """
    Download a report as CSV (UTF-8 with BOM) or pretty-printed JSON.
    """
    try:
        content, media_type, filename, row_count = build_export(
            db,
            tenant_id=ctx.tenant.id,
            export_type=export_type,
            export_format=format,
            date_range=date_range,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    audit_service.record(
        db,
        ctx,
        AuditAction.EXPORT,
        EXPORT_ENTITY[export_type],
        entity_name=filename,
        new_data={"type": export_type, "format": format, "date_range": date_range, "rows": row_count},
    )
    return Response(
        content=content.encode("utf-8"),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
