from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from orgportal.config.database import get_db
from orgportal.core.credentials import CredentialStore
from orgportal.core.errors import DuplicateEntry, NotFound, ValidationError
from orgportal.core.principal import Principal, PrincipalKind, principal_key
from orgportal.core.roles import Capability
from orgportal.core.tokens import TokenIssuer
from orgportal.features.audit.router import log_action
from orgportal.features.auth.dependencies import get_credential_store, get_token_issuer, require
from orgportal.models.admin import Admin
from orgportal.repositories.admin import AdminRepository

router = APIRouter(prefix="/admins", tags=["Admins"])

class AdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = "admin"
    type: str = "admin"

class AdminUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = None
    status: Optional[Literal["active", "inactive"]] = None

class AdminResponse(BaseModel):
    id: str
    email: EmailStr
    name: str
    type: str
    status: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True

def _find_admin(db: Session, admin_id: str) -> Admin:
    admin = AdminRepository(db).find_by_id(admin_id)
    if not admin:
        raise NotFound("Admin not found")
    return admin

@router.post("/", response_model=AdminResponse)
def create_admin(
    admin: AdminCreate,
    db: Session = Depends(get_db),
    current: Principal = Depends(require(Capability.MANAGE_ADMINS)),
    credentials: CredentialStore = Depends(get_credential_store),
):
    repository = AdminRepository(db)
    if repository.find_by_email(admin.email):
        raise DuplicateEntry()

    new_admin = Admin(email=admin.email, name=admin.name, type=admin.type, status="active")
    new_admin.set_password(admin.password)
    credentials.prepare_for_persistence(new_admin)
    repository.save(new_admin)

    log_action(db, current, "CREATE_ADMIN", details=f"Created admin: {new_admin.email}")
    return new_admin

@router.get("/", response_model=List[AdminResponse])
def read_admins(skip: int = 0, limit: int = 100, db: Session = Depends(get_db), current: Principal = Depends(require(Capability.MANAGE_ADMINS))):
    return AdminRepository(db).list(skip=skip, limit=limit)

@router.get("/{admin_id}", response_model=AdminResponse)
def read_admin(admin_id: str, db: Session = Depends(get_db), current: Principal = Depends(require(Capability.MANAGE_ADMINS))):
    return _find_admin(db, admin_id)

@router.put("/{admin_id}", response_model=AdminResponse)
def update_admin(
    admin_id: str,
    changes: AdminUpdate,
    db: Session = Depends(get_db),
    current: Principal = Depends(require(Capability.MANAGE_ADMINS)),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    admin = _find_admin(db, admin_id)
    # Deletion is final, a deleted admin cannot be edited back to life
    if admin.status == "deleted":
        raise ValidationError("Cannot update a deleted admin")
    data = changes.model_dump(exclude_unset=True)
    if data.get("status") == "inactive" and admin.id == current.id:
        raise ValidationError("Cannot deactivate yourself")
    for field, value in data.items():
        if value is not None:
            setattr(admin, field, value)
    AdminRepository(db).save(admin)

    if admin.status != "active":
        issuer.revoke(principal_key(PrincipalKind.ADMIN, admin.id))
    log_action(db, current, "UPDATE_ADMIN", details=f"Updated {sorted(data)} of admin: {admin.email}")
    return admin

@router.delete("/{admin_id}")
def delete_admin(
    admin_id: str,
    db: Session = Depends(get_db),
    current: Principal = Depends(require(Capability.MANAGE_ADMINS)),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    admin = _find_admin(db, admin_id)
    if admin.id == current.id:
        raise ValidationError("Cannot delete yourself")

    admin.status = "deleted"
    AdminRepository(db).save(admin)
    issuer.revoke(principal_key(PrincipalKind.ADMIN, admin.id))

    log_action(db, current, "DELETE_ADMIN", details=f"Deleted admin: {admin.email} (ID: {admin_id})")
    return {"message": "Admin deleted"}
