"""FastAPI dependencies wiring the auth core into routes.

A request walks: token present? -> token valid? -> principal still exists and
is active? -> capability held? Any failure ends the request with 401/403.
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from orgportal.config.database import SessionLocal, get_db
from orgportal.config.settings import settings
from orgportal.core.credentials import CredentialStore
from orgportal.core.errors import AuthError, RevokedToken
from orgportal.core.guard import AccessGuard
from orgportal.core.principal import Principal
from orgportal.core.revocation import RevocationStore, create_revocation_store
from orgportal.core.roles import Capability
from orgportal.core.tokens import TokenIssuer
from orgportal.features.auth.service import load_principal
from orgportal.utils.redact import mask_token

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "access_token"

# auto_error=False so a missing header can fall back to the cookie
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/org-users/login", auto_error=False)


@lru_cache
def get_credential_store() -> CredentialStore:
    return CredentialStore(rounds=settings.BCRYPT_ROUNDS)


@lru_cache
def get_revocation_store() -> RevocationStore:
    return create_revocation_store(settings.REVOCATION_BACKEND, SessionLocal)


def get_token_issuer(revocations: RevocationStore = Depends(get_revocation_store)) -> TokenIssuer:
    return TokenIssuer.from_settings(settings, revocations)


def get_access_guard() -> AccessGuard:
    return AccessGuard()


def get_bearer_token(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    return token or request.cookies.get(ACCESS_COOKIE)


def get_optional_principal(
    token: Optional[str] = Depends(get_bearer_token),
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Optional[Principal]:
    """The caller's principal, ``None`` when no token was sent.

    A token that is present but invalid is an error, never anonymous access.
    """
    if not token:
        return None
    try:
        claims = issuer.validate(token)
    except AuthError as exc:
        logger.info("Rejected token %s: %s (%s)", mask_token(token), type(exc).__name__, exc.reason)
        raise
    principal = load_principal(db, claims.kind, claims.principal_id)
    if principal is None:
        logger.info("Rejected token %s: principal %s no longer exists", mask_token(token), claims.key)
        raise RevokedToken(reason="principal deleted")
    return principal


def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
    guard: AccessGuard = Depends(get_access_guard),
) -> Principal:
    """Authenticated and active caller, whatever its role."""
    guard.admit(principal).raise_for_denial()
    return principal


def require(capability: Capability):
    """Dependency factory: the active caller must hold ``capability``."""

    def dependency(
        principal: Optional[Principal] = Depends(get_optional_principal),
        guard: AccessGuard = Depends(get_access_guard),
    ) -> Principal:
        guard.authorize(principal, capability).raise_for_denial()
        return principal

    return dependency
