from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session
from typing import List, Optional
from orgportal.config.database import get_db
from orgportal.config.settings import settings
from orgportal.core.credentials import CredentialStore
from orgportal.core.guard import capabilities_for
from orgportal.core.principal import Principal, PrincipalKind
from orgportal.core.tokens import TokenIssuer
from orgportal.features.audit.router import log_action
from orgportal.features.auth import service
from orgportal.features.auth.dependencies import (
    ACCESS_COOKIE,
    get_credential_store,
    get_current_principal,
    get_token_issuer,
)

router = APIRouter(prefix="/auth", tags=["Auth"])

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class RefreshRequest(BaseModel):
    refresh_token: str

class ChangePasswordRequest(BaseModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)

class PrincipalResponse(BaseModel):
    id: str
    kind: PrincipalKind
    email: str
    name: Optional[str] = None
    designation: Optional[str] = None
    status: str
    org_id: Optional[str] = None

    @classmethod
    def from_principal(cls, principal: Principal) -> "PrincipalResponse":
        return cls(
            id=principal.id,
            kind=principal.kind,
            email=principal.email,
            name=principal.name,
            designation=principal.designation.value if principal.designation else None,
            status=principal.status.value,
            org_id=principal.org_id,
        )

class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    principal: PrincipalResponse

class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"

class MeResponse(BaseModel):
    principal: PrincipalResponse
    capabilities: List[str]

def _set_access_cookie(response: Response, access_token: str):
    response.set_cookie(
        ACCESS_COOKIE,
        access_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        domain=settings.COOKIE_DOMAIN,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

def _login(kind: PrincipalKind, body: LoginRequest, response: Response, db: Session,
           credentials: CredentialStore, issuer: TokenIssuer) -> LoginResponse:
    _, principal, tokens = service.login(db, credentials, issuer, kind, body.email, body.password)
    _set_access_cookie(response, tokens.access_token)
    log_action(db, principal, "LOGIN")
    return LoginResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        token_type=tokens.token_type,
        principal=PrincipalResponse.from_principal(principal),
    )

@router.post("/admins/login", response_model=LoginResponse)
def login_admin(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    credentials: CredentialStore = Depends(get_credential_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    return _login(PrincipalKind.ADMIN, body, response, db, credentials, issuer)

@router.post("/org-users/login", response_model=LoginResponse)
def login_org_user(
    body: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    credentials: CredentialStore = Depends(get_credential_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    return _login(PrincipalKind.ORG_USER, body, response, db, credentials, issuer)

@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(body: RefreshRequest, response: Response, issuer: TokenIssuer = Depends(get_token_issuer)):
    access_token = issuer.refresh(body.refresh_token)
    _set_access_cookie(response, access_token)
    return AccessTokenResponse(access_token=access_token)

@router.post("/logout")
def logout(
    response: Response,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    issuer.revoke(principal.key)
    response.delete_cookie(ACCESS_COOKIE, domain=settings.COOKIE_DOMAIN)
    log_action(db, principal, "LOGOUT")
    return {"message": "Logged out"}

@router.get("/me", response_model=MeResponse)
def read_me(principal: Principal = Depends(get_current_principal)):
    return MeResponse(
        principal=PrincipalResponse.from_principal(principal),
        capabilities=sorted(c.value for c in capabilities_for(principal)),
    )

@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    response: Response,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    credentials: CredentialStore = Depends(get_credential_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    service.change_password(db, credentials, issuer, principal, body.old_password, body.new_password)
    response.delete_cookie(ACCESS_COOKIE, domain=settings.COOKIE_DOMAIN)
    log_action(db, principal, "CHANGE_PASSWORD")
    return {"message": "Password changed, please log in again"}
