from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from pydantic import BaseModel
from datetime import datetime
from orgportal.config.database import get_db
from orgportal.core.principal import Principal
from orgportal.core.roles import Capability
from orgportal.features.auth.dependencies import require
from orgportal.models.audit import AuditLog

router = APIRouter(prefix="/audit", tags=["Audit"])

class AuditResponse(BaseModel):
    id: int
    actor_kind: Optional[str]
    actor_id: Optional[str]
    action: str
    details: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True

def log_action(db: Session, actor: Optional[Principal], action: str, details: str = None):
    log = AuditLog(
        actor_kind=actor.kind.value if actor else None,
        actor_id=actor.id if actor else None,
        action=action,
        details=details,
    )
    db.add(log)
    db.commit()

@router.get("/", response_model=List[AuditResponse])
def read_audit_logs(
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    admin: Principal = Depends(require(Capability.VIEW_AUDIT_LOG)),
):
    return db.query(AuditLog).order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
