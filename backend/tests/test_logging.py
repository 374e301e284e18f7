import json
import logging
import os

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["SKIP_MIGRATIONS"] = "1"

from app.main import app  # noqa: E402
import app.core.db as db_module  # noqa: E402
from app.core.db import Base  # noqa: E402
from app.core.logging import JsonLogFormatter  # noqa: E402
from tests.factories import make_api_key  # noqa: E402


def _setup_db(db_url: str):
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        future=True,
    )
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    return SessionLocal


def test_logging_includes_request_id_and_organization_id(caplog, tmp_path, monkeypatch):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'logging.db'}")
    monkeypatch.setattr(db_module, "SessionLocal", SessionLocal)
    with SessionLocal() as db:
        _, raw_key = make_api_key(db, organization_id="org-42")

    logger = logging.getLogger("api_logger")
    logger.addHandler(caplog.handler)
    logger.setLevel(logging.INFO)
    try:
        client = TestClient(app)
        response = client.get(
            "/api/v1/verifications",
            headers={
                "X-Request-ID": "req-123",
                "X-API-Key": raw_key,
                "X-Organization-ID": "org-42",
            },
        )
        assert response.status_code == 200
        assert response.headers.get("X-Request-ID") == "req-123"

        records = [rec for rec in caplog.records if rec.getMessage() == "request.completed"]
        assert records, "Expected a structured request log entry"
        entry = records[-1]
        assert getattr(entry, "request_id", None) == "req-123"
        assert getattr(entry, "organization_id", None) == "org-42"
        assert getattr(entry, "status_code", None) == 200
    finally:
        logger.removeHandler(caplog.handler)


def test_json_formatter_keeps_extra_fields():
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "verification.checked", None, None)
    record.verification_id = "v1"
    record.status = "verified"
    record.organization_id = None
    payload = json.loads(JsonLogFormatter().format(record))
    assert payload["message"] == "verification.checked"
    assert payload["level"] == "INFO"
    assert payload["verification_id"] == "v1"
    assert payload["status"] == "verified"
    assert "organization_id" in payload
