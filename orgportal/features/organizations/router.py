from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session
from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from orgportal.config.database import get_db
from orgportal.core.errors import NotFound
from orgportal.core.guard import AccessGuard
from orgportal.core.principal import Principal, PrincipalKind, principal_key
from orgportal.core.roles import Capability
from orgportal.core.tokens import TokenIssuer
from orgportal.features.audit.router import log_action
from orgportal.features.auth.dependencies import get_access_guard, get_current_principal, get_token_issuer, require
from orgportal.models.organization import Organization
from orgportal.repositories.org_user import OrgUserRepository
from orgportal.repositories.organization import OrganizationRepository
from orgportal.utils.uploads import ORGANIZATION, save_picture

router = APIRouter(prefix="/organizations", tags=["Organizations"])

class OrganizationBase(BaseModel):
    email: EmailStr
    vat_no: Optional[str] = None
    tel: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    pin: Optional[str] = None
    contact_person: Optional[str] = None
    c_mobile: Optional[str] = None
    c_email: Optional[EmailStr] = None
    type: Optional[str] = None

class OrganizationCreate(OrganizationBase):
    name_en: str = Field(min_length=1)
    name_ar: str = Field(min_length=1)

class OrganizationUpdate(BaseModel):
    name_en: Optional[str] = Field(default=None, min_length=1)
    name_ar: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    vat_no: Optional[str] = None
    tel: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    pin: Optional[str] = None
    contact_person: Optional[str] = None
    c_mobile: Optional[str] = None
    c_email: Optional[EmailStr] = None
    type: Optional[str] = None
    status: Optional[Literal["Active", "Inactive"]] = None

class OrganizationResponse(BaseModel):
    id: str
    name_en: str
    name_ar: str
    email: str
    vat_no: Optional[str]
    tel: Optional[str]
    country: Optional[str]
    state: Optional[str]
    city: Optional[str]
    pin: Optional[str]
    contact_person: Optional[str]
    c_mobile: Optional[str]
    c_email: Optional[str]
    picture: Optional[str]
    type: Optional[str]
    status: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True

# Only platform admins may change these
PLATFORM_FIELDS = ("status", "vat_no")
REQUIRED_FIELDS = ("name_en", "name_ar", "email", "status")

def _find_organization(db: Session, org_id: str) -> Organization:
    org = OrganizationRepository(db).find_by_id(org_id)
    if not org:
        raise NotFound("Organization not found")
    return org

def _deactivate_members(db: Session, org_id: str, issuer: TokenIssuer):
    # Members of a deactivated organization lose their sessions and their access
    users = OrgUserRepository(db)
    for user in users.list_by_org(org_id, active_only=True, limit=None):
        user.status = "Inactive"
        users.save(user)
        issuer.revoke(principal_key(PrincipalKind.ORG_USER, user.id))

@router.post("/", response_model=OrganizationResponse)
def create_organization(
    organization: OrganizationCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require(Capability.MANAGE_ORGANIZATIONS)),
):
    data = organization.model_dump()
    data["vat_no"] = data["vat_no"] or None
    new_org = Organization(**data, status="Active")
    OrganizationRepository(db).save(new_org)

    log_action(db, admin, "CREATE_ORGANIZATION", details=f"Created organization: {new_org.name_en} ({new_org.id})")
    return new_org

@router.get("/", response_model=List[OrganizationResponse])
def read_organizations(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require(Capability.MANAGE_ORGANIZATIONS)),
):
    return OrganizationRepository(db).list(skip=skip, limit=limit)

@router.get("/{org_id}", response_model=OrganizationResponse)
def read_organization(
    org_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    guard: AccessGuard = Depends(get_access_guard),
):
    guard.authorize_in_org(principal, Capability.VIEW_ORGANIZATION, org_id).raise_for_denial()
    return _find_organization(db, org_id)

@router.put("/{org_id}", response_model=OrganizationResponse)
def update_organization(
    org_id: str,
    changes: OrganizationUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require(Capability.EDIT_ORGANIZATION)),
    guard: AccessGuard = Depends(get_access_guard),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    guard.authorize_in_org(principal, Capability.EDIT_ORGANIZATION, org_id).raise_for_denial()
    org = _find_organization(db, org_id)

    data = changes.model_dump(exclude_unset=True)
    if any(field in data for field in PLATFORM_FIELDS):
        guard.authorize(principal, Capability.MANAGE_ORGANIZATIONS).raise_for_denial()
    if "vat_no" in data:
        data["vat_no"] = data["vat_no"] or None
    for field, value in data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(org, field, value)
    OrganizationRepository(db).save(org)
    if data.get("status") == "Inactive":
        _deactivate_members(db, org_id, issuer)

    log_action(db, principal, "UPDATE_ORGANIZATION", details=f"Updated {sorted(data)} of organization: {org.id}")
    return org

@router.delete("/{org_id}")
def delete_organization(
    org_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require(Capability.MANAGE_ORGANIZATIONS)),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    org = _find_organization(db, org_id)
    org.status = "Inactive"
    OrganizationRepository(db).save(org)
    _deactivate_members(db, org_id, issuer)

    log_action(db, admin, "DELETE_ORGANIZATION", details=f"Deactivated organization: {org.name_en} ({org_id})")
    return {"message": "Organization deleted"}

@router.post("/{org_id}/picture", response_model=OrganizationResponse)
def upload_organization_picture(
    org_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require(Capability.EDIT_ORGANIZATION)),
    guard: AccessGuard = Depends(get_access_guard),
):
    guard.authorize_in_org(principal, Capability.EDIT_ORGANIZATION, org_id).raise_for_denial()
    org = _find_organization(db, org_id)
    org.picture = save_picture(file, ORGANIZATION)
    OrganizationRepository(db).save(org)
    log_action(db, principal, "UPLOAD_ORGANIZATION_PICTURE", details=f"Picture for organization: {org.id}")
    return org
