import logging
from typing import Optional, Tuple
from sqlalchemy.orm import Session
from orgportal.core.credentials import CredentialStore
from orgportal.core.errors import AccountInactive, InvalidCredentials
from orgportal.core.principal import Principal, PrincipalKind
from orgportal.core.tokens import TokenIssuer, TokenPair
from orgportal.repositories.admin import AdminRepository
from orgportal.repositories.org_user import OrgUserRepository
from orgportal.utils.redact import mask_email

logger = logging.getLogger(__name__)

def repository_for(db: Session, kind: PrincipalKind):
    if PrincipalKind(kind) is PrincipalKind.ADMIN:
        return AdminRepository(db)
    return OrgUserRepository(db)

def to_principal(kind: PrincipalKind, record) -> Principal:
    if PrincipalKind(kind) is PrincipalKind.ADMIN:
        return Principal.from_admin(record)
    return Principal.from_org_user(record)

def load_principal(db: Session, kind: PrincipalKind, principal_id: str) -> Optional[Principal]:
    record = repository_for(db, kind).find_by_id(principal_id)
    if record is None:
        return None
    return to_principal(kind, record)

def authenticate_user(db: Session, credentials: CredentialStore, kind: PrincipalKind, email: str, password: str) -> Tuple[object, Principal]:
    """Check email and password. Unknown email and wrong password fail identically."""
    record = repository_for(db, kind).find_by_email(email)
    if record is None:
        credentials.dummy_verify(password)
        logger.info("Login failed for %s %s: unknown email", kind.value, mask_email(email))
        raise InvalidCredentials(reason="unknown email")
    if not credentials.verify(password, record.hashed_password):
        logger.info("Login failed for %s %s: wrong password", kind.value, record.id)
        raise InvalidCredentials(reason="wrong password")

    principal = to_principal(kind, record)
    if not principal.is_active:
        logger.info("Login refused for %s %s: account %s", kind.value, record.id, principal.status.value)
        raise AccountInactive()
    return record, principal

def login(db: Session, credentials: CredentialStore, issuer: TokenIssuer, kind: PrincipalKind, email: str, password: str) -> Tuple[object, Principal, TokenPair]:
    record, principal = authenticate_user(db, credentials, kind, email, password)
    tokens = issuer.issue(principal)
    logger.info("Login successful for %s", principal.key)
    return record, principal, tokens

def change_password(db: Session, credentials: CredentialStore, issuer: TokenIssuer, principal: Principal, old_password: str, new_password: str) -> None:
    repository = repository_for(db, principal.kind)
    record = repository.find_by_id(principal.id)
    if record is None or not credentials.verify(old_password, record.hashed_password):
        raise InvalidCredentials(reason="old password mismatch")
    credentials.rotate(repository, principal.id, new_password)
    issuer.revoke(principal.key)
