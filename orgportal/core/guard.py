"""Access Guard: turns (principal, capability) into an allow/deny decision."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from orgportal.core.errors import AccountInactive, InsufficientRole, Unauthenticated
from orgportal.core.principal import Principal, PrincipalKind
from orgportal.core.roles import (
    PLATFORM_CAPABILITIES,
    Capability,
    CapabilitySet,
    can_assign,
    capabilities,
)

logger = logging.getLogger(__name__)


class DenialReason(str, Enum):
    UNAUTHENTICATED = "Unauthenticated"
    ACCOUNT_INACTIVE = "AccountInactive"
    INSUFFICIENT_ROLE = "InsufficientRole"


_DENIAL_ERRORS = {
    DenialReason.UNAUTHENTICATED: Unauthenticated,
    DenialReason.ACCOUNT_INACTIVE: AccountInactive,
    DenialReason.INSUFFICIENT_ROLE: InsufficientRole,
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenialReason] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: DenialReason) -> "Decision":
        return cls(False, reason)

    def raise_for_denial(self) -> None:
        if not self.allowed:
            raise _DENIAL_ERRORS[self.reason](reason=self.reason.value)


def capabilities_for(principal: Principal) -> CapabilitySet:
    """Capabilities of a principal: its designation's set, plus platform ones for Admins."""
    caps = capabilities(principal.designation)
    if principal.kind is PrincipalKind.ADMIN:
        return caps | PLATFORM_CAPABILITIES
    return caps


class AccessGuard:
    def __init__(self, resolver: Callable[[Principal], CapabilitySet] = capabilities_for):
        self._resolve = resolver

    def admit(self, principal: Optional[Principal]) -> Decision:
        """Authentication and account status checks, before any capability."""
        if principal is None:
            return Decision.deny(DenialReason.UNAUTHENTICATED)
        if not principal.is_active:
            return Decision.deny(DenialReason.ACCOUNT_INACTIVE)
        return Decision.allow()

    def authorize(self, principal: Optional[Principal], required: Capability) -> Decision:
        decision = self.admit(principal)
        if not decision.allowed:
            return decision
        if required in self._resolve(principal):
            return decision
        logger.info("Denied %s to %s (%s)", required.value, principal.key, principal.designation)
        return Decision.deny(DenialReason.INSUFFICIENT_ROLE)

    def authorize_in_org(self, principal: Optional[Principal], required: Capability, org_id: Optional[str]) -> Decision:
        """Like ``authorize``, but org users may only act inside their own organization."""
        decision = self.authorize(principal, required)
        if not decision.allowed or principal.kind is PrincipalKind.ADMIN:
            return decision
        if org_id is None or principal.org_id != org_id:
            logger.info("Denied cross-organization %s to %s", required.value, principal.key)
            return Decision.deny(DenialReason.INSUFFICIENT_ROLE)
        return decision

    def authorize_over(self, principal: Principal, target_designation) -> Decision:
        """Whether the principal may assign, or act on a holder of, a designation."""
        decision = self.admit(principal)
        if not decision.allowed:
            return decision
        if can_assign(principal.designation, target_designation):
            return decision
        return Decision.deny(DenialReason.INSUFFICIENT_ROLE)
