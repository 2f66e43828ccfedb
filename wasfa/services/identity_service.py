"""
Resolve "who is acting, for which clinic, with which capabilities".
"""

from uuid import UUID

from sqlalchemy.orm import Session

from wasfa.models.profile import Profile
from wasfa.models.tenant import Tenant
from wasfa.models.user import User
from wasfa.models.user_role import RoleName
from wasfa.services.errors import NoTenantError, NotFoundError
from wasfa.services.permission_service import get_capabilities, has_capability, primary_role
from wasfa.services.user_role_service import get_user_roles


class ResolvedIdentity:
    """
    The principal plus its clinic linkage and role set.

    - profile is None when the principal has no profile row.
    - tenant is None when the profile is unassigned (tenant_id NULL).
    """

    def __init__(
        self,
        user: User,
        profile: Profile | None,
        tenant: Tenant | None,
        roles: list[RoleName],
    ):
        self.user = user
        self.profile = profile
        self.tenant = tenant
        self.roles = roles

    @property
    def primary_role(self) -> RoleName | None:
        return primary_role(self.roles)

    @property
    def capabilities(self) -> dict[str, bool]:
        return get_capabilities(self.roles)

    def can(self, capability: str) -> bool:
        return has_capability(self.roles, capability)

    @property
    def display_name(self) -> str:
        if self.profile and self.profile.full_name:
            return self.profile.full_name
        return self.user.email


def resolve_identity(db: Session, user_id: UUID) -> ResolvedIdentity:
    """
    Look up the principal's profile, tenant and roles.

    Raises NotFoundError if the principal itself does not exist.
    """
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    profile = db.get(Profile, user_id)
    tenant = None
    if profile and profile.tenant_id:
        tenant = db.get(Tenant, profile.tenant_id)

    roles = get_user_roles(db, user_id)
    return ResolvedIdentity(user=user, profile=profile, tenant=tenant, roles=roles)


def require_tenant(identity: ResolvedIdentity) -> Tenant:
    """
    Return the identity's tenant or refuse. Never falls back to another tenant.
    """
    if identity.profile is None:
        raise NoTenantError("Profile not found")
    if identity.profile.tenant_id is None:
        raise NoTenantError("No tenant assigned to this user")
    if identity.tenant is None:
        raise NotFoundError("Tenant not found")
    return identity.tenant
