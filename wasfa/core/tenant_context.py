# wasfa/core/tenant_context.py
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from wasfa.api.v1.endpoints.auth import get_current_user
from wasfa.core.database import get_db
from wasfa.models.profile import Profile
from wasfa.models.tenant import Tenant
from wasfa.models.user import User
from wasfa.models.user_role import RoleName
from wasfa.services.errors import NoTenantError, NotFoundError
from wasfa.services.identity_service import ResolvedIdentity, require_tenant, resolve_identity
from wasfa.services.permission_service import get_capabilities, has_capability


class TenantContext:
    """
    Wraps the current tenant and user for tenant-scoped operations.

    - tenant:  the caller's clinic (never a fallback)
    - user:    current authenticated principal
    - profile: the principal's clinic-facing profile
    - roles:   role rows held by the principal
    """

    def __init__(self, tenant: Tenant, user: User, profile: Profile, roles: list[RoleName]):
        self.tenant = tenant
        self.user = user
        self.profile = profile
        self.roles = roles

    @classmethod
    def from_identity(cls, identity: ResolvedIdentity) -> "TenantContext":
        tenant = require_tenant(identity)
        return cls(tenant=tenant, user=identity.user, profile=identity.profile, roles=identity.roles)

    @property
    def display_name(self) -> str:
        return self.profile.full_name or self.user.email

    @property
    def capabilities(self) -> dict[str, bool]:
        return get_capabilities(self.roles)

    def can(self, capability: str) -> bool:
        return has_capability(self.roles, capability)


def get_tenant_context(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TenantContext:
    """
    Resolve tenant, profile and roles for the current user.

    - No profile or tenant_id NULL -> 403 (unassigned principals cannot
      touch clinic data).
    """
    try:
        identity = resolve_identity(db, current_user.id)
        return TenantContext.from_identity(identity)
    except NoTenantError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
