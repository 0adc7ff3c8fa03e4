from sqlalchemy import Column, Integer, String
from orgportal.config.database import Base

class TokenGeneration(Base):
    __tablename__ = "token_generations"

    key = Column(String, primary_key=True) # "<kind>:<principal id>"
    generation = Column(Integer, nullable=False, default=0)
