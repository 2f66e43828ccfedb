"""
Subscription gate: (subscription_status, trial_ends_at, now) -> status info.

Pure functions; transitions between statuses happen outside the application
(payment webhooks, platform admin).
"""

import math
from datetime import datetime

from wasfa.models.tenant import SubscriptionStatus, Tenant
from wasfa.schemas.subscription import SubscriptionInfo
from wasfa.services.errors import SubscriptionInactiveError
from wasfa.utils.datetime_utils import as_utc, utc_now

TRIAL_WARNING_DAYS = 7
SECONDS_PER_DAY = 24 * 60 * 60


def days_remaining(trial_ends_at: datetime | None, now: datetime) -> int | None:
    if trial_ends_at is None:
        return None
    delta = as_utc(trial_ends_at) - as_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def get_subscription_info(
    status: SubscriptionStatus | str | None,
    trial_ends_at: datetime | None,
    now: datetime | None = None,
) -> SubscriptionInfo:
    now = as_utc(now) if now else utc_now()
    status = SubscriptionStatus(status or SubscriptionStatus.TRIAL)
    remaining = days_remaining(trial_ends_at, now)

    if status == SubscriptionStatus.ACTIVE:
        is_active = True
    elif status == SubscriptionStatus.TRIAL:
        is_active = trial_ends_at is not None and now < as_utc(trial_ends_at)
    else:
        is_active = False

    message = ""
    if status == SubscriptionStatus.TRIAL and remaining is not None:
        message = f"trial_days_remaining:{remaining}" if remaining > 0 else "trial_expired"
    elif status == SubscriptionStatus.TRIAL:
        message = "trial_expired"
    elif status == SubscriptionStatus.EXPIRED:
        message = "subscription_expired"
    elif status == SubscriptionStatus.SUSPENDED:
        message = "subscription_suspended"

    warning = (
        status == SubscriptionStatus.TRIAL
        and remaining is not None
        and 0 < remaining <= TRIAL_WARNING_DAYS
    )

    return SubscriptionInfo(
        status=status,
        is_active=is_active,
        can_create_prescription=is_active,
        days_remaining=remaining,
        trial_ends_at=as_utc(trial_ends_at) if trial_ends_at else None,
        message=message,
        warning=warning,
        # Suspended accounts go through support, not the upgrade flow.
        can_upgrade=status in (SubscriptionStatus.TRIAL, SubscriptionStatus.EXPIRED),
    )


def get_tenant_subscription(tenant: Tenant, now: datetime | None = None) -> SubscriptionInfo:
    return get_subscription_info(tenant.subscription_status, tenant.trial_ends_at, now)


def ensure_can_create_prescription(tenant: Tenant, now: datetime | None = None) -> SubscriptionInfo:
    """
    Write-path enforcement of the gate.
    Raises SubscriptionInactiveError carrying the message code.
    """
    info = get_tenant_subscription(tenant, now)
    if not info.can_create_prescription:
        raise SubscriptionInactiveError(info.message or "subscription_inactive")
    return info
