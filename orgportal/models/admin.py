import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from orgportal.config.database import Base
from orgportal.models.mixins import PasswordMixin

class Admin(PasswordMixin, Base):
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False, default="admin")
    hashed_password = Column(String, nullable=False)
    type = Column(String, nullable=False, default="admin")
    status = Column(String, nullable=False, default="active") # 'active' | 'inactive' | 'deleted'
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Admin {self.id} {self.status}>"
