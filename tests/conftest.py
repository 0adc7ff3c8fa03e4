"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; these must be set before any app import
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("REVOCATION_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from orgportal.config.database import Base, get_db
from orgportal.config.settings import settings
from orgportal.core.credentials import CredentialStore
from orgportal.core.revocation import InMemoryRevocationStore
from orgportal.core.tokens import TokenIssuer
from orgportal.features.auth.dependencies import (
    get_credential_store,
    get_revocation_store,
    get_token_issuer,
)
from orgportal.models.admin import Admin
from orgportal.models.org_user import OrgUser
from orgportal.models.organization import Organization
from orgportal.repositories.admin import AdminRepository
from orgportal.repositories.org_user import OrgUserRepository
from orgportal.repositories.organization import OrganizationRepository

PASSWORD = "correct-horse-42"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def credentials():
    return CredentialStore(rounds=4)


@pytest.fixture
def revocations():
    return InMemoryRevocationStore()


@pytest.fixture
def issuer(revocations):
    return TokenIssuer(settings.SECRET_KEY, revocations)


@pytest.fixture
def client(session_factory, credentials, revocations, issuer, tmp_path, monkeypatch):
    """API client bound to the per-test database and auth collaborators."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_credential_store] = lambda: credentials
    app.dependency_overrides[get_revocation_store] = lambda: revocations
    app.dependency_overrides[get_token_issuer] = lambda: issuer
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def organization(db_session):
    org = Organization(name_en="Acme", name_ar="أكمي", email="info@acme.test", vat_no="VAT-12345", status="Active")
    return OrganizationRepository(db_session).save(org)


@pytest.fixture
def other_organization(db_session):
    org = Organization(name_en="Globex", name_ar="جلوبكس", email="info@globex.test", status="Active")
    return OrganizationRepository(db_session).save(org)


@pytest.fixture
def make_org_user(db_session, credentials):
    def factory(org, designation="Cashier", email=None, status="Active", password=PASSWORD):
        user = OrgUser(
            org_id=org.id,
            name=f"{designation} user",
            email=email or f"{designation.lower()}-{org.name_en.lower()}@example.com",
            designation=designation,
            status=status,
        )
        user.set_password(password)
        credentials.prepare_for_persistence(user)
        return OrgUserRepository(db_session).save(user)

    return factory


@pytest.fixture
def super_admin(db_session, credentials):
    admin = Admin(email="root@example.com", name="Root", status="active")
    admin.set_password(PASSWORD)
    credentials.prepare_for_persistence(admin)
    return AdminRepository(db_session).save(admin)


def login(client, email, password=PASSWORD, kind="org-users"):
    response = client.post(f"/auth/{kind}/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    """Log a principal in and return bearer headers for it."""

    def factory(record, password=PASSWORD):
        kind = "admins" if isinstance(record, Admin) else "org-users"
        return login(client, record.email, password, kind=kind)

    return factory
