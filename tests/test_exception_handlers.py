import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from orgportal.config.exception_handlers import register_exception_handlers
from orgportal.core.errors import (
    AccountInactive,
    CredentialError,
    ExpiredToken,
    InsufficientRole,
    NotFound,
    ValidationError,
)


@pytest.fixture
def error_client():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{name}")
    def raise_error(name: str):
        errors = {
            "credential": CredentialError(reason="bcrypt exploded"),
            "expired": ExpiredToken(reason="exp in the past"),
            "inactive": AccountInactive(),
            "role": InsufficientRole(),
            "invalid": ValidationError("Bad VAT"),
            "missing": NotFound("User not found"),
        }
        if name in errors:
            raise errors[name]
        raise RuntimeError("boom")

    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize("name,status,message", [
    ("credential", 500, "Internal server error"),
    ("expired", 401, "Token has expired"),
    ("inactive", 403, "Account is inactive"),
    ("role", 403, "Not authorized to perform this action"),
    ("invalid", 400, "Bad VAT"),
    ("missing", 404, "User not found"),
    ("unexpected", 500, "Internal server error"),
])
def test_errors_map_to_status_and_message(error_client, name, status, message):
    response = error_client.get(f"/raise/{name}")

    assert response.status_code == status
    assert response.json() == {"message": message}


def test_internal_reason_is_not_sent(error_client):
    response = error_client.get("/raise/credential")

    assert "bcrypt" not in response.text


def test_auth_errors_carry_challenge_header(error_client):
    assert error_client.get("/raise/expired").headers["www-authenticate"] == "Bearer"
    assert "www-authenticate" not in error_client.get("/raise/role").headers


def test_unknown_route_uses_message_body(error_client):
    response = error_client.get("/nowhere")

    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}
