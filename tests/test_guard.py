import pytest

from orgportal.core.errors import AccountInactive, InsufficientRole, Unauthenticated
from orgportal.core.guard import AccessGuard, Decision, DenialReason
from orgportal.core.principal import Principal, PrincipalKind, PrincipalStatus
from orgportal.core.roles import Capability, Designation


def org_user(designation=Designation.MANAGER, status=PrincipalStatus.ACTIVE, org_id="org-1"):
    return Principal(
        id="u1",
        kind=PrincipalKind.ORG_USER,
        email="u1@example.com",
        designation=designation,
        status=status,
        org_id=org_id,
    )


def platform_admin(status=PrincipalStatus.ACTIVE):
    return Principal(id="a1", kind=PrincipalKind.ADMIN, email="a1@example.com",
                     designation=Designation.ADMIN, status=status)


@pytest.fixture
def guard():
    return AccessGuard()


def test_manager_cannot_delete_users(guard):
    decision = guard.authorize(org_user(Designation.MANAGER), Capability.DELETE_USER)

    assert decision == Decision.deny(DenialReason.INSUFFICIENT_ROLE)


def test_manager_can_edit_organization(guard):
    assert guard.authorize(org_user(Designation.MANAGER), Capability.EDIT_ORGANIZATION) == Decision.allow()


def test_missing_principal_is_unauthenticated(guard):
    decision = guard.authorize(None, Capability.VIEW_ORGANIZATION)

    assert decision.reason is DenialReason.UNAUTHENTICATED


@pytest.mark.parametrize("status", [PrincipalStatus.INACTIVE, PrincipalStatus.DELETED])
@pytest.mark.parametrize("capability", list(Capability))
def test_inactive_principal_denied_everything(guard, status, capability):
    assert guard.authorize(org_user(Designation.ADMIN, status), capability).reason is DenialReason.ACCOUNT_INACTIVE
    assert guard.authorize(platform_admin(status), capability).reason is DenialReason.ACCOUNT_INACTIVE


def test_inactive_check_precedes_role_lookup():
    calls = []

    def resolver(principal):
        calls.append(principal)
        return frozenset(Capability)

    guard = AccessGuard(resolver=resolver)
    guard.authorize(org_user(status=PrincipalStatus.INACTIVE), Capability.VIEW_REPORTS)

    assert calls == []


def test_unknown_designation_denied(guard):
    principal = org_user(designation=None)

    assert guard.authorize(principal, Capability.VIEW_ORGANIZATION).reason is DenialReason.INSUFFICIENT_ROLE


def test_decision_is_deterministic(guard):
    principal = org_user(Designation.CASHIER)

    decisions = {guard.authorize(principal, Capability.PROCESS_REFUNDS) for _ in range(5)}

    assert decisions == {Decision.deny(DenialReason.INSUFFICIENT_ROLE)}


def test_org_user_confined_to_own_organization(guard):
    manager = org_user(Designation.MANAGER, org_id="org-1")

    assert guard.authorize_in_org(manager, Capability.EDIT_ORGANIZATION, "org-1").allowed
    assert guard.authorize_in_org(manager, Capability.EDIT_ORGANIZATION, "org-2").reason is DenialReason.INSUFFICIENT_ROLE
    assert guard.authorize_in_org(manager, Capability.EDIT_ORGANIZATION, None).reason is DenialReason.INSUFFICIENT_ROLE


def test_platform_admin_spans_organizations(guard):
    assert guard.authorize_in_org(platform_admin(), Capability.DELETE_USER, "any-org").allowed


def test_authorize_over_admin_designation(guard):
    assert guard.authorize_over(org_user(Designation.ADMIN), Designation.ADMIN).allowed
    assert not guard.authorize_over(org_user(Designation.MANAGER), Designation.ADMIN).allowed
    assert guard.authorize_over(org_user(Designation.MANAGER), Designation.CASHIER).allowed


@pytest.mark.parametrize("reason,error", [
    (DenialReason.UNAUTHENTICATED, Unauthenticated),
    (DenialReason.ACCOUNT_INACTIVE, AccountInactive),
    (DenialReason.INSUFFICIENT_ROLE, InsufficientRole),
])
def test_raise_for_denial(reason, error):
    with pytest.raises(error) as excinfo:
        Decision.deny(reason).raise_for_denial()

    assert excinfo.value.status_code == (401 if reason is DenialReason.UNAUTHENTICATED else 403)


def test_allow_does_not_raise():
    Decision.allow().raise_for_denial()
