from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "Org Portal"
    DATABASE_URL: str = "sqlite:///./orgportal.db"
    SECRET_KEY: str # Required, the app refuses to start without it
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12
    REVOCATION_BACKEND: str = "database" # "database" or "memory"
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    CORS_ORIGINS: List[str] = ["*"]
    COOKIE_DOMAIN: Optional[str] = None
    COOKIE_SECURE: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("SECRET_KEY")
    @classmethod
    def secret_key_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("SECRET_KEY must not be blank")
        return value

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def bcrypt_rounds_in_range(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return value

    @field_validator("REVOCATION_BACKEND")
    @classmethod
    def known_revocation_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in ("database", "memory"):
            raise ValueError("REVOCATION_BACKEND must be 'database' or 'memory'")
        return value

settings = Settings()
