import pytest
from pydantic import ValidationError

from orgportal.config.settings import Settings


def test_missing_secret_key_refuses_to_start(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_blank_secret_key_refuses_to_start(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "   ")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_values_come_from_environment(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "from-env")
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "5")
    monkeypatch.setenv("REVOCATION_BACKEND", "MEMORY")

    config = Settings(_env_file=None)

    assert config.SECRET_KEY == "from-env"
    assert config.ACCESS_TOKEN_EXPIRE_MINUTES == 5
    assert config.REVOCATION_BACKEND == "memory"


@pytest.mark.parametrize("name,value", [("BCRYPT_ROUNDS", "3"), ("BCRYPT_ROUNDS", "32"), ("REVOCATION_BACKEND", "redis")])
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv("SECRET_KEY", "from-env")
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
