import pytest

from wasfa.models.user_role import RoleName
from wasfa.services.permission_service import (
    CREATE_PRESCRIPTION,
    MANAGE_CLINIC,
    MANAGE_PATIENTS,
    MANAGE_TEMPLATES,
    VIEW_STATISTICS,
    get_capabilities,
    has_capability,
    primary_role,
)


def test_assistant_can_only_manage_patients():
    caps = get_capabilities([RoleName.ASSISTANT])
    assert caps == {
        MANAGE_CLINIC: False,
        CREATE_PRESCRIPTION: False,
        MANAGE_PATIENTS: True,
        MANAGE_TEMPLATES: False,
        VIEW_STATISTICS: False,
    }


def test_doctor_capabilities():
    caps = get_capabilities(["doctor"])
    assert caps[CREATE_PRESCRIPTION] is True
    assert caps[MANAGE_TEMPLATES] is True
    assert caps[VIEW_STATISTICS] is True
    assert caps[MANAGE_CLINIC] is False


@pytest.mark.parametrize("role", [RoleName.SUPER_ADMIN, RoleName.CLINIC_ADMIN])
def test_admins_hold_every_capability(role):
    assert all(get_capabilities([role]).values())


def test_no_roles_means_no_capabilities():
    assert not any(get_capabilities([]).values())
    assert primary_role([]) is None


def test_capabilities_are_ored_across_roles():
    caps = get_capabilities([RoleName.ASSISTANT, RoleName.DOCTOR])
    assert caps[CREATE_PRESCRIPTION] is True
    assert caps[MANAGE_PATIENTS] is True


def test_primary_role_picks_highest_privilege():
    assert primary_role([RoleName.ASSISTANT, RoleName.CLINIC_ADMIN]) == RoleName.CLINIC_ADMIN


def test_unknown_capability_raises():
    with pytest.raises(KeyError):
        has_capability([RoleName.DOCTOR], "launch_rockets")
