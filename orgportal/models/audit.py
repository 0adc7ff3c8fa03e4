from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime
from orgportal.config.database import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_kind = Column(String, nullable=True) # 'admin' | 'org_user', null for system actions
    actor_id = Column(String(36), nullable=True)
    action = Column(String, nullable=False) # e.g., "CREATE_ORG_USER", "DELETE_ADMIN"
    details = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow)
