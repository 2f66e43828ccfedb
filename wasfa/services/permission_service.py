"""
Role → capability resolution.

Capabilities are pure functions of the held role set, OR'd across roles.
A principal with no role rows gets every capability False.
"""

from typing import Iterable

from wasfa.models.user_role import RoleName

MANAGE_CLINIC = "manage_clinic"
CREATE_PRESCRIPTION = "create_prescription"
MANAGE_PATIENTS = "manage_patients"
MANAGE_TEMPLATES = "manage_templates"
VIEW_STATISTICS = "view_statistics"

CAPABILITY_ROLES: dict[str, frozenset[RoleName]] = {
    MANAGE_CLINIC: frozenset({RoleName.SUPER_ADMIN, RoleName.CLINIC_ADMIN}),
    CREATE_PRESCRIPTION: frozenset({RoleName.SUPER_ADMIN, RoleName.CLINIC_ADMIN, RoleName.DOCTOR}),
    MANAGE_PATIENTS: frozenset(
        {RoleName.SUPER_ADMIN, RoleName.CLINIC_ADMIN, RoleName.DOCTOR, RoleName.ASSISTANT}
    ),
    MANAGE_TEMPLATES: frozenset({RoleName.SUPER_ADMIN, RoleName.CLINIC_ADMIN, RoleName.DOCTOR}),
    VIEW_STATISTICS: frozenset({RoleName.SUPER_ADMIN, RoleName.CLINIC_ADMIN, RoleName.DOCTOR}),
}

# Highest privilege first; used to pick a primary role for display.
ROLE_PRIORITY: tuple[RoleName, ...] = (
    RoleName.SUPER_ADMIN,
    RoleName.CLINIC_ADMIN,
    RoleName.DOCTOR,
    RoleName.ASSISTANT,
)


def has_capability(roles: Iterable[RoleName | str], capability: str) -> bool:
    allowed = CAPABILITY_ROLES.get(capability)
    if allowed is None:
        raise KeyError(f"Unknown capability: {capability}")
    return any(RoleName(r) in allowed for r in roles)


def get_capabilities(roles: Iterable[RoleName | str]) -> dict[str, bool]:
    """
    Build the full capability map, e.g. {"manage_clinic": False, ...}.
    """
    held = {RoleName(r) for r in roles}
    return {capability: bool(held & allowed) for capability, allowed in CAPABILITY_ROLES.items()}


def primary_role(roles: Iterable[RoleName | str]) -> RoleName | None:
    held = {RoleName(r) for r in roles}
    for role in ROLE_PRIORITY:
        if role in held:
            return role
    return None
