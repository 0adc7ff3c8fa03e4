from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from orgportal.config.database import get_db
from orgportal.core.credentials import CredentialStore
from orgportal.core.errors import DuplicateEntry, NotFound, ValidationError
from orgportal.core.guard import AccessGuard
from orgportal.core.principal import Principal, PrincipalKind, principal_key
from orgportal.core.roles import Capability, Designation
from orgportal.core.tokens import TokenIssuer
from orgportal.features.audit.router import log_action
from orgportal.features.auth.dependencies import (
    get_access_guard,
    get_credential_store,
    get_current_principal,
    get_token_issuer,
    require,
)
from orgportal.models.org_user import OrgUser
from orgportal.repositories.org_user import OrgUserRepository
from orgportal.repositories.organization import OrganizationRepository
from orgportal.utils.uploads import PROFILE, save_picture

router = APIRouter(prefix="/org-users", tags=["Org Users"])

REQUIRED_FIELDS = ("name", "email", "designation", "status")

# Pydantic Models
class OrgUserCreate(BaseModel):
    org_id: str
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    tel: Optional[str] = None
    address: Optional[str] = None
    designation: Designation = Designation.CASHIER

class OrgUserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    tel: Optional[str] = None
    address: Optional[str] = None
    designation: Optional[Designation] = None
    status: Optional[Literal["Active", "Inactive"]] = None

class OrgUserResponse(BaseModel):
    id: str
    org_id: str
    name: str
    email: EmailStr
    tel: Optional[str]
    address: Optional[str]
    picture: Optional[str]
    status: str
    designation: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True

def _find_user(db: Session, user_id: str) -> OrgUser:
    user = OrgUserRepository(db).find_by_id(user_id)
    if not user:
        raise NotFound("User not found")
    return user

def _require_active_organization(db: Session, org_id: str):
    org = OrganizationRepository(db).find_by_id(org_id)
    if not org:
        raise NotFound("Organization not found")
    if org.status != "Active":
        raise ValidationError("Organization must be active to assign users")
    return org

def _is_self(principal: Principal, user: OrgUser) -> bool:
    return principal.kind is PrincipalKind.ORG_USER and principal.id == user.id

def _authorize_on_user(guard: AccessGuard, principal: Principal, capability: Capability, user: OrgUser):
    guard.authorize_in_org(principal, capability, user.org_id).raise_for_denial()
    guard.authorize_over(principal, user.designation).raise_for_denial()

@router.post("/", response_model=OrgUserResponse)
def create_org_user(
    user: OrgUserCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require(Capability.CREATE_USER)),
    guard: AccessGuard = Depends(get_access_guard),
    credentials: CredentialStore = Depends(get_credential_store),
):
    guard.authorize_in_org(principal, Capability.CREATE_USER, user.org_id).raise_for_denial()
    guard.authorize_over(principal, user.designation).raise_for_denial()

    _require_active_organization(db, user.org_id)

    repository = OrgUserRepository(db)
    if repository.find_by_email(user.email):
        raise DuplicateEntry()

    new_user = OrgUser(
        org_id=user.org_id,
        name=user.name,
        email=user.email,
        tel=user.tel,
        address=user.address,
        designation=user.designation.value,
        status="Active",
    )
    new_user.set_password(user.password)
    credentials.prepare_for_persistence(new_user)
    repository.save(new_user)

    log_action(db, principal, "CREATE_ORG_USER", details=f"Created {new_user.designation} {new_user.email} in org {new_user.org_id}")
    return new_user

@router.get("/", response_model=List[OrgUserResponse])
def read_org_users(
    org_id: Optional[str] = None,
    active_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require(Capability.MANAGE_USERS)),
    guard: AccessGuard = Depends(get_access_guard),
):
    if principal.kind is PrincipalKind.ORG_USER:
        org_id = org_id or principal.org_id
        guard.authorize_in_org(principal, Capability.MANAGE_USERS, org_id).raise_for_denial()
    return OrgUserRepository(db).list_by_org(org_id, active_only=active_only, skip=skip, limit=limit)

@router.get("/{user_id}", response_model=OrgUserResponse)
def read_org_user(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    guard: AccessGuard = Depends(get_access_guard),
):
    user = _find_user(db, user_id)
    if not _is_self(principal, user):
        guard.authorize_in_org(principal, Capability.MANAGE_USERS, user.org_id).raise_for_denial()
    return user

@router.put("/{user_id}", response_model=OrgUserResponse)
def update_org_user(
    user_id: str,
    changes: OrgUserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require(Capability.EDIT_USER)),
    guard: AccessGuard = Depends(get_access_guard),
    credentials: CredentialStore = Depends(get_credential_store),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    user = _find_user(db, user_id)
    _authorize_on_user(guard, principal, Capability.EDIT_USER, user)

    data = changes.model_dump(exclude_unset=True, exclude={"password"})
    if data.get("designation") is not None:
        guard.authorize_over(principal, data["designation"]).raise_for_denial()
        data["designation"] = data["designation"].value
    if data.get("status") == "Inactive" and _is_self(principal, user):
        raise ValidationError("Cannot deactivate yourself")
    if data.get("status") == "Active":
        _require_active_organization(db, user.org_id)
    for field, value in data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(user, field, value)

    if changes.password is not None:
        user.set_password(changes.password)
        credentials.prepare_for_persistence(user)
    OrgUserRepository(db).save(user)

    if changes.password is not None or user.status != "Active":
        issuer.revoke(principal_key(PrincipalKind.ORG_USER, user.id))
    log_action(db, principal, "UPDATE_ORG_USER", details=f"Updated {sorted(changes.model_fields_set)} of user: {user.email}")
    return user

def _set_status(db: Session, user: OrgUser, status: str, principal: Principal, issuer: TokenIssuer, action: str):
    user.status = status
    OrgUserRepository(db).save(user)
    if status != "Active":
        issuer.revoke(principal_key(PrincipalKind.ORG_USER, user.id))
    log_action(db, principal, action, details=f"{action.title().replace('_', ' ')}: {user.email}")

@router.patch("/{user_id}/activate")
def activate_org_user(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require(Capability.EDIT_USER)),
    guard: AccessGuard = Depends(get_access_guard),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    user = _find_user(db, user_id)
    _authorize_on_user(guard, principal, Capability.EDIT_USER, user)
    _require_active_organization(db, user.org_id)
    _set_status(db, user, "Active", principal, issuer, "ACTIVATE_ORG_USER")
    return {"message": "User activated"}

@router.patch("/{user_id}/deactivate")
def deactivate_org_user(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require(Capability.EDIT_USER)),
    guard: AccessGuard = Depends(get_access_guard),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    user = _find_user(db, user_id)
    _authorize_on_user(guard, principal, Capability.EDIT_USER, user)
    if _is_self(principal, user):
        raise ValidationError("Cannot deactivate yourself")
    _set_status(db, user, "Inactive", principal, issuer, "DEACTIVATE_ORG_USER")
    return {"message": "User deactivated"}

@router.delete("/{user_id}")
def delete_org_user(
    user_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require(Capability.DELETE_USER)),
    guard: AccessGuard = Depends(get_access_guard),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    user = _find_user(db, user_id)
    _authorize_on_user(guard, principal, Capability.DELETE_USER, user)
    if _is_self(principal, user):
        raise ValidationError("Cannot delete yourself")
    # Soft delete, the row stays for audit and history
    _set_status(db, user, "Inactive", principal, issuer, "DELETE_ORG_USER")
    return {"message": "User deleted"}

@router.post("/{user_id}/picture", response_model=OrgUserResponse)
def upload_org_user_picture(
    user_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    guard: AccessGuard = Depends(get_access_guard),
):
    user = _find_user(db, user_id)
    if not _is_self(principal, user):
        _authorize_on_user(guard, principal, Capability.EDIT_USER, user)
    user.picture = save_picture(file, PROFILE)
    OrgUserRepository(db).save(user)
    log_action(db, principal, "UPLOAD_ORG_USER_PICTURE", details=f"Picture for user: {user.email}")
    return user
