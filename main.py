from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from orgportal.config.database import engine, Base
from orgportal.config.exception_handlers import register_exception_handlers
from orgportal.config.logging_setup import configure_logging
from orgportal.config.settings import settings
from orgportal.features.auth.router import router as auth_router
from orgportal.features.admins.router import router as admins_router
from orgportal.features.organizations.router import router as organizations_router
from orgportal.features.org_users.router import router as org_users_router
from orgportal.features.audit.router import router as audit_router
from orgportal.models import admin, audit, org_user, organization, token_generation  # noqa: F401 register tables

configure_logging(settings.LOG_LEVEL)

# Create Database Tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.PROJECT_NAME)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(admins_router)
app.include_router(organizations_router)
app.include_router(org_users_router)
app.include_router(audit_router)

# Pictures are stored as paths relative to UPLOAD_DIR
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

@app.get("/")
def read_root():
    return {"message": "Org Portal is running"}
