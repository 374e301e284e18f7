import os
from datetime import datetime, timedelta
from types import SimpleNamespace

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["SKIP_MIGRATIONS"] = "1"

from app.verification.state_machine import transition


NOW = datetime(2024, 5, 1, 12, 0, 0)


def _record(status, verified_at=None):
    return SimpleNamespace(status=status, verified_at=verified_at)


def test_pending_with_proof_becomes_verified():
    result = transition(_record("pending"), True, NOW)
    assert result.status == "verified"
    assert result.verified_at == NOW
    assert result.changed is True
    assert result.event == "verification.completed"


def test_pending_without_proof_becomes_failed():
    result = transition(_record("pending"), False, NOW)
    assert result.status == "failed"
    assert result.verified_at is None
    assert result.changed is True
    assert result.event == "verification.failed"


def test_failed_can_recover():
    result = transition(_record("failed"), True, NOW)
    assert result.previous_status == "failed"
    assert result.status == "verified"
    assert result.event == "verification.completed"


def test_repeated_failure_is_not_a_change():
    result = transition(_record("failed"), False, NOW)
    assert result.status == "failed"
    assert result.changed is False
    assert result.event is None


def test_verified_is_terminal():
    earlier = NOW - timedelta(days=1)
    for proof_found in (True, False):
        result = transition(_record("verified", earlier), proof_found, NOW)
        assert result.status == "verified"
        assert result.verified_at == earlier
        assert result.changed is False
        assert result.event is None
