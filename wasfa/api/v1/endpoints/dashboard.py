# wasfa/api/v1/endpoints/dashboard.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wasfa.core.config import get_settings
from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext, get_tenant_context
from wasfa.dependencies.authz import require_capability
from wasfa.schemas.dashboard import NotificationItem, StatisticsResponse
from wasfa.schemas.subscription import SubscriptionInfo
from wasfa.services.dashboard_service import get_notifications, get_statistics
from wasfa.services.permission_service import VIEW_STATISTICS
from wasfa.services.subscription_service import get_tenant_subscription
from wasfa.utils.labels import normalize_language

router = APIRouter()
logger = logging.getLogger(__name__)

settings = get_settings()


@router.get("/subscription", response_model=SubscriptionInfo)
def read_subscription(ctx: TenantContext = Depends(get_tenant_context)) -> SubscriptionInfo:
    """
    Subscription gate for the caller's clinic: status, days remaining,
    whether prescriptions can be created and whether to offer an upgrade.
    """
    return get_tenant_subscription(ctx.tenant)


@router.get("/statistics", response_model=StatisticsResponse)
def read_statistics(
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(VIEW_STATISTICS)),
) -> StatisticsResponse:
    return get_statistics(db, tenant_id=ctx.tenant.id)


@router.get("/notifications", response_model=list[NotificationItem])
def read_notifications(
    language: Optional[str] = Query(None, description="ar, fr or en"),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> list[NotificationItem]:
    """
    Notifications are derived on each call; nothing is stored, so there is
    no read/unread state on the server.
    """
    return get_notifications(
        db,
        tenant=ctx.tenant,
        language=normalize_language(language, settings.default_language),
    )
