from dataclasses import dataclass
from enum import Enum
from typing import Optional

from orgportal.core.roles import Designation


class PrincipalKind(str, Enum):
    ADMIN = "admin"
    ORG_USER = "org_user"


class PrincipalStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DELETED = "deleted"

    @classmethod
    def parse(cls, value) -> "PrincipalStatus":
        # Admins store lower case, org users capitalized; anything unknown is not active
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.INACTIVE


@dataclass(frozen=True)
class Principal:
    """An authenticated actor, detached from its database row."""

    id: str
    kind: PrincipalKind
    email: str
    designation: Optional[Designation]
    status: PrincipalStatus
    org_id: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status is PrincipalStatus.ACTIVE

    @property
    def key(self) -> str:
        return principal_key(self.kind, self.id)

    @classmethod
    def from_admin(cls, admin) -> "Principal":
        return cls(
            id=admin.id,
            kind=PrincipalKind.ADMIN,
            email=admin.email,
            designation=Designation.ADMIN,
            status=PrincipalStatus.parse(admin.status),
            name=admin.name,
        )

    @classmethod
    def from_org_user(cls, user) -> "Principal":
        return cls(
            id=user.id,
            kind=PrincipalKind.ORG_USER,
            email=user.email,
            designation=Designation.parse(user.designation),
            status=PrincipalStatus.parse(user.status),
            org_id=user.org_id,
            name=user.name,
        )


def principal_key(kind: PrincipalKind, principal_id: str) -> str:
    return f"{PrincipalKind(kind).value}:{principal_id}"
