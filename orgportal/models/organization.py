import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from orgportal.config.database import Base

class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name_en = Column(String, nullable=False)
    name_ar = Column(String, nullable=False)
    email = Column(String, nullable=False)
    vat_no = Column(String(30), unique=True, nullable=True)
    tel = Column(String, nullable=True)
    country = Column(String, nullable=True)
    state = Column(String, nullable=True)
    city = Column(String, nullable=True)
    pin = Column(String, nullable=True)
    contact_person = Column(String, nullable=True)
    c_mobile = Column(String, nullable=True)
    c_email = Column(String, nullable=True)
    picture = Column(String, nullable=True) # Relative path under UPLOAD_DIR
    type = Column(String, nullable=True)
    status = Column(String, nullable=False, default="Active") # 'Active' | 'Inactive'
    created_at = Column(DateTime, default=datetime.utcnow)
