"""Designations, capabilities and the table that maps one to the other.

``Designation`` is the single source of truth for role names: the API
schemas, the database validation and the capability table all use it.
"""

from enum import Enum
from typing import FrozenSet, Optional, Union


class Designation(str, Enum):
    ADMIN = "Admin"
    MANAGER = "Manager"
    CASHIER = "Cashier"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Union[str, "Designation", None]) -> Optional["Designation"]:
        """Exact, case-sensitive lookup. Unknown values give ``None``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Capability(str, Enum):
    # User management
    MANAGE_USERS = "canManageUsers"
    CREATE_USER = "canCreateUser"
    EDIT_USER = "canEditUser"
    DELETE_USER = "canDeleteUser"
    # Organization
    EDIT_ORGANIZATION = "canEditOrganization"
    VIEW_ORGANIZATION = "canViewOrganization"
    # Reports
    VIEW_REPORTS = "canViewReports"
    EXPORT_REPORTS = "canExportReports"
    # Financial operations
    PROCESS_REFUNDS = "canProcessRefunds"
    APPROVE_TRANSACTIONS = "canApproveTransactions"
    # Settings and dashboards
    ACCESS_SETTINGS = "canAccessSettings"
    VIEW_FULL_DASHBOARD = "canViewFullDashboard"
    VIEW_CASHIER_DASHBOARD = "canViewCashierDashboard"
    # Platform, held only by Admin principals
    MANAGE_ORGANIZATIONS = "canManageOrganizations"
    MANAGE_ADMINS = "canManageAdmins"
    VIEW_AUDIT_LOG = "canViewAuditLog"


CapabilitySet = FrozenSet[Capability]

EMPTY: CapabilitySet = frozenset()

_READ_ONLY = frozenset({
    Capability.VIEW_ORGANIZATION,
    Capability.VIEW_REPORTS,
})

_ADMIN_OR_MANAGER = _READ_ONLY | {
    Capability.MANAGE_USERS,
    Capability.CREATE_USER,
    Capability.EDIT_USER,
    Capability.EDIT_ORGANIZATION,
    Capability.EXPORT_REPORTS,
    Capability.PROCESS_REFUNDS,
    Capability.APPROVE_TRANSACTIONS,
    Capability.ACCESS_SETTINGS,
    Capability.VIEW_FULL_DASHBOARD,
}

CAPABILITY_TABLE = {
    Designation.ADMIN: _ADMIN_OR_MANAGER | {Capability.DELETE_USER},
    Designation.MANAGER: frozenset(_ADMIN_OR_MANAGER),
    Designation.CASHIER: _READ_ONLY | {Capability.VIEW_CASHIER_DASHBOARD},
    Designation.OTHER: frozenset(_READ_ONLY),
}

PLATFORM_CAPABILITIES: CapabilitySet = frozenset({
    Capability.MANAGE_ORGANIZATIONS,
    Capability.MANAGE_ADMINS,
    Capability.VIEW_AUDIT_LOG,
})


def capabilities(designation) -> CapabilitySet:
    """Capability set for a designation; unknown or missing gives the empty set."""
    parsed = Designation.parse(designation)
    if parsed is None:
        return EMPTY
    return CAPABILITY_TABLE[parsed]


def can_assign(actor: Optional[Designation], target) -> bool:
    """Whether ``actor`` may grant ``target`` or act on a user holding it.

    Only Admins may hand out, or touch holders of, the Admin designation.
    """
    if Designation.parse(target) is Designation.ADMIN:
        return Designation.parse(actor) is Designation.ADMIN
    return True
