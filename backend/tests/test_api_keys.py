import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["SKIP_MIGRATIONS"] = "1"

from app import models  # noqa: F401
from app.core.db import Base
from app.core.keys import API_KEY_PREFIX, hash_token
from app.crud.api_keys import (
    create_api_key,
    deactivate_api_key,
    get_api_key_by_raw_key,
    is_api_key_authorized,
    list_api_keys,
)
from app.scope.context import VerificationScope
from app.scope.dependencies import resolve_scope
from app.scope.errors import ScopeForbidden, ScopeRequired


def _setup_db(db_url: str):
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        future=True,
    )
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    return SessionLocal


def test_raw_key_is_never_stored(tmp_path):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'keys.db'}")
    with SessionLocal() as db:
        api_key, raw_key = create_api_key(db, "org_acme", "CI")
        assert raw_key.startswith(API_KEY_PREFIX)
        assert api_key.key_hash == hash_token(raw_key)
        assert api_key.key_hash != raw_key
        assert api_key.key_prefix == raw_key[:7]
        assert api_key.key_suffix == raw_key[-4:]
        assert get_api_key_by_raw_key(db, raw_key).id == api_key.id
        assert get_api_key_by_raw_key(db, "") is None
        assert [k.id for k in list_api_keys(db, "org_acme")] == [api_key.id]


def test_key_is_bound_to_its_organization(tmp_path):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'keys.db'}")
    with SessionLocal() as db:
        api_key, raw_key = create_api_key(db, "org_acme", "CI")
        assert api_key.last_used_at is None
        assert is_api_key_authorized(db, raw_key, "org_acme") is True
        db.refresh(api_key)
        assert api_key.last_used_at is not None
        assert is_api_key_authorized(db, raw_key, "org_other") is False
        assert is_api_key_authorized(db, "dv_unknown", "org_acme") is False


def test_deactivated_key_is_rejected(tmp_path):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'keys.db'}")
    with SessionLocal() as db:
        api_key, raw_key = create_api_key(db, "org_acme", "CI")
        assert deactivate_api_key(db, "org_other", api_key.id) is False
        assert deactivate_api_key(db, "org_acme", api_key.id) is True
        assert is_api_key_authorized(db, raw_key, "org_acme") is False


def test_resolve_scope(tmp_path):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'keys.db'}")
    with SessionLocal() as db:
        _, raw_key = create_api_key(db, "org_acme", "CI")

        scope = resolve_scope(db, api_key=raw_key, organization_id=" org_acme ", session_id="sess")
        assert scope == VerificationScope.for_organization("org_acme")

        scope = resolve_scope(db, api_key=None, organization_id="org_acme", session_id="sess")
        assert scope == VerificationScope.for_session("sess")

        with pytest.raises(ScopeRequired):
            resolve_scope(db, api_key=raw_key, organization_id=None, session_id=None)
        with pytest.raises(ScopeForbidden):
            resolve_scope(db, api_key=raw_key, organization_id="org_other", session_id=None)
        with pytest.raises(ScopeRequired):
            resolve_scope(db, api_key=None, organization_id=None, session_id=None)


def test_scope_needs_exactly_one_owner():
    with pytest.raises(ValueError):
        VerificationScope()
    with pytest.raises(ValueError):
        VerificationScope(organization_id="org_acme", session_id="sess")
