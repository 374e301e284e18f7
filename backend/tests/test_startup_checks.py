import os

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from app.core.config import Settings
from app.core.startup_checks import run_startup_checks


def _settings(**overrides):
    values = {
        "DATABASE_URL": "postgresql://dv:dv@db/dv",
        "SECRET_KEY": "k" * 48,
        "ENVIRONMENT": "production",
        "SESSION_COOKIE_SECURE": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_production_settings_pass():
    run_startup_checks(_settings())


def test_development_allows_sqlite_and_short_secret():
    run_startup_checks(
        _settings(
            ENVIRONMENT="development",
            DATABASE_URL="sqlite:///./dev.db",
            SECRET_KEY="secret",
            SESSION_COOKIE_SECURE=False,
        )
    )


@pytest.mark.parametrize(
    "overrides, flagged",
    [
        ({"SECRET_KEY": "changeme"}, "SECRET_KEY"),
        ({"SECRET_KEY": "short"}, "SECRET_KEY"),
        ({"DATABASE_URL": "sqlite:///./prod.db"}, "DATABASE_URL"),
        ({"SESSION_COOKIE_SECURE": False}, "SESSION_COOKIE_SECURE"),
    ],
)
def test_production_rejects_insecure_settings(overrides, flagged):
    with pytest.raises(RuntimeError) as excinfo:
        run_startup_checks(_settings(**overrides))
    assert flagged in str(excinfo.value)


def test_missing_required_values():
    with pytest.raises(RuntimeError) as excinfo:
        run_startup_checks(_settings(ENVIRONMENT="development", SECRET_KEY=""))
    assert "Missing required settings: SECRET_KEY" in str(excinfo.value)
