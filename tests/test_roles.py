import pytest

from orgportal.core.guard import capabilities_for
from orgportal.core.principal import Principal, PrincipalKind, PrincipalStatus
from orgportal.core.roles import (
    EMPTY,
    PLATFORM_CAPABILITIES,
    Capability,
    Designation,
    can_assign,
    capabilities,
)

C = Capability

# (designation, manage users, delete user, edit organization, process refunds, full dashboard)
TABLE = [
    ("Admin", True, True, True, True, True),
    ("Manager", True, False, True, True, True),
    ("Cashier", False, False, False, False, False),
    ("Other", False, False, False, False, False),
]


@pytest.mark.parametrize("designation,manage,delete,edit_org,refunds,dashboard", TABLE)
def test_capability_table(designation, manage, delete, edit_org, refunds, dashboard):
    caps = capabilities(designation)

    assert (C.MANAGE_USERS in caps) is manage
    assert (C.DELETE_USER in caps) is delete
    assert (C.EDIT_ORGANIZATION in caps) is edit_org
    assert (C.PROCESS_REFUNDS in caps) is refunds
    assert (C.VIEW_FULL_DASHBOARD in caps) is dashboard


def test_enum_and_string_designations_agree():
    for designation in Designation:
        assert capabilities(designation) == capabilities(designation.value)


def test_only_cashier_gets_cashier_dashboard():
    holders = [d for d in Designation if C.VIEW_CASHIER_DASHBOARD in capabilities(d)]

    assert holders == [Designation.CASHIER]


def test_every_known_designation_can_view_its_organization():
    for designation in Designation:
        assert C.VIEW_ORGANIZATION in capabilities(designation)


@pytest.mark.parametrize("designation", [None, "", "admin", "ADMIN", "Owner", "SuperAdmin", " Manager", 3])
def test_unknown_designation_is_empty(designation):
    assert capabilities(designation) == EMPTY


def test_platform_capabilities_never_come_from_designation():
    for designation in Designation:
        assert not capabilities(designation) & PLATFORM_CAPABILITIES


def _principal(kind, designation):
    return Principal(id="p1", kind=kind, email="p@example.com", designation=designation, status=PrincipalStatus.ACTIVE)


def test_admin_principal_adds_platform_capabilities():
    caps = capabilities_for(_principal(PrincipalKind.ADMIN, Designation.ADMIN))

    assert PLATFORM_CAPABILITIES <= caps
    assert capabilities(Designation.ADMIN) <= caps


def test_org_admin_has_no_platform_capabilities():
    caps = capabilities_for(_principal(PrincipalKind.ORG_USER, Designation.ADMIN))

    assert not caps & PLATFORM_CAPABILITIES


@pytest.mark.parametrize("actor,target,allowed", [
    (Designation.ADMIN, Designation.ADMIN, True),
    (Designation.MANAGER, Designation.ADMIN, False),
    (Designation.MANAGER, Designation.MANAGER, True),
    (Designation.MANAGER, "Cashier", True),
    (None, Designation.ADMIN, False),
    ("Cashier", "Other", True),
])
def test_can_assign(actor, target, allowed):
    assert can_assign(actor, target) is allowed
