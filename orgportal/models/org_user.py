import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from orgportal.config.database import Base
from orgportal.models.mixins import PasswordMixin

class OrgUser(PasswordMixin, Base):
    __tablename__ = "org_users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    org_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    tel = Column(String, nullable=True)
    address = Column(String, nullable=True)
    picture = Column(String, nullable=True) # Relative path under UPLOAD_DIR
    status = Column(String, nullable=False, default="Active") # 'Active' | 'Inactive'
    designation = Column(String, nullable=False, default="Cashier") # see core.roles.Designation
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<OrgUser {self.id} {self.designation} {self.status}>"
