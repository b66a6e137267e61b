"""Settings validation tests."""

import pytest
from pydantic import ValidationError

from tagblaze.config import Settings


def test_default_secret_refused_outside_development():
    with pytest.raises(ValidationError):
        Settings(environment="production")


def test_dev_routes_follow_environment():
    assert Settings(environment="development").enable_dev_routes is True
    assert Settings(environment="production", jwt_secret="s3cret").enable_dev_routes is False


def test_dev_routes_explicit_override():
    s = Settings(environment="production", jwt_secret="s3cret", enable_dev_routes=True)
    assert s.enable_dev_routes is True


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("TAGBLAZE_BCRYPT_ROUNDS", "5")
    monkeypatch.setenv("TAGBLAZE_ACCESS_TOKEN_EXPIRE_MINUTES", "15")
    s = Settings()
    assert s.bcrypt_rounds == 5
    assert s.access_token_expire_minutes == 15
