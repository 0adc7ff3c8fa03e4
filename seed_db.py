import logging
import os
from orgportal.config.database import SessionLocal, Base, engine
from orgportal.config.logging_setup import configure_logging
from orgportal.config.settings import settings
from orgportal.core.credentials import CredentialStore
from orgportal.models import audit, org_user, organization, token_generation  # noqa: F401
from orgportal.models.admin import Admin
from orgportal.repositories.admin import AdminRepository

logger = logging.getLogger("seed_db")

# Ensure tables exist
Base.metadata.create_all(bind=engine)

def seed():
    email = os.environ.get("SEED_ADMIN_EMAIL")
    password = os.environ.get("SEED_ADMIN_PASSWORD")
    if not email or not password:
        raise SystemExit("Set SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD to create the first admin")

    db = SessionLocal()
    try:
        repository = AdminRepository(db)
        if repository.find_by_email(email):
            logger.info("Admin already exists")
            return
        logger.info("Creating admin: %s", email)
        admin = Admin(email=email, name=os.environ.get("SEED_ADMIN_NAME", "admin"), status="active")
        admin.set_password(password)
        CredentialStore(rounds=settings.BCRYPT_ROUNDS).prepare_for_persistence(admin)
        repository.save(admin)
    finally:
        db.close()

if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    seed()
