# wasfa/dependencies/authz.py
from fastapi import Depends, HTTPException, status

from wasfa.core.tenant_context import TenantContext, get_tenant_context
from wasfa.services.permission_service import CAPABILITY_ROLES


def require_capability(capability: str):
    """
    Dependency factory for capability-based access.

    Usage:

    @router.post("/templates")
    def create(ctx: TenantContext = Depends(require_capability(MANAGE_TEMPLATES))):
        ...

    Returns the TenantContext if any held role grants the capability.
    Roles are re-read on every request, so role changes apply immediately.
    """
    if capability not in CAPABILITY_ROLES:
        raise KeyError(f"Unknown capability: {capability}")

    def dependency(ctx: TenantContext = Depends(get_tenant_context)) -> TenantContext:
        if not ctx.can(capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {capability}",
            )
        return ctx

    return dependency
