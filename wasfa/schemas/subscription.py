from datetime import datetime

from pydantic import BaseModel

from wasfa.models.tenant import SubscriptionStatus


class SubscriptionInfo(BaseModel):
    status: SubscriptionStatus
    is_active: bool
    can_create_prescription: bool
    days_remaining: int | None = None
    trial_ends_at: datetime | None = None
    message: str = ""
    warning: bool = False
    can_upgrade: bool = False
