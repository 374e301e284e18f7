import json
import os
import threading
import time
from concurrent.futures import wait

import requests

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ["SKIP_MIGRATIONS"] = "1"

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.webhooks.sender as sender_module
from app import models  # noqa: F401
from app.core.db import Base
from app.webhooks.dispatcher import WebhookDispatcher
from tests.factories import bypass_proxies, make_webhook, slow_drip_server


def _setup_db(db_url: str):
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False},
        future=True,
    )
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Base.metadata.create_all(bind=engine)
    return SessionLocal


class _Response:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class _RecordingPost:
    def __init__(self, fail_urls=()):
        self.calls = []
        self.fail_urls = set(fail_urls)
        self._lock = threading.Lock()

    def __call__(self, url, data=None, headers=None, timeout=None, stream=False):
        with self._lock:
            self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if url in self.fail_urls:
            raise requests.ConnectionError("refused")
        return _Response(200)


def test_dispatch_only_reaches_active_subscribers(monkeypatch, tmp_path):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'webhooks.db'}")
    post = _RecordingPost()
    monkeypatch.setattr(sender_module.requests, "post", post)
    dispatcher = WebhookDispatcher(timeout_seconds=2.0, max_workers=2)
    try:
        with SessionLocal() as db:
            make_webhook(
                db,
                organization_id="org_a",
                url="https://inactive.example.com/hook",
                events=["verification.completed"],
                is_active=False,
            )
            make_webhook(db, organization_id="org_a", url="https://active.example.com/hook")
            make_webhook(
                db,
                organization_id="org_a",
                url="https://failed-only.example.com/hook",
                events=["verification.failed"],
            )
            make_webhook(db, organization_id="org_b", url="https://other-org.example.com/hook")

            futures = dispatcher.dispatch(
                db,
                "org_a",
                "verification.completed",
                {"id": "v1", "domain": "example.com", "status": "verified"},
            )
        wait(futures, timeout=5)
    finally:
        dispatcher.shutdown()

    assert [f.result() for f in futures] == [True]
    assert len(post.calls) == 1
    call = post.calls[0]
    assert call["url"] == "https://active.example.com/hook"
    assert call["headers"]["X-Webhook-Event"] == "verification.completed"
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["timeout"] == 2.0
    assert json.loads(call["data"])["domain"] == "example.com"


def test_failing_endpoint_does_not_block_others(monkeypatch, tmp_path):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'webhooks.db'}")
    post = _RecordingPost(fail_urls={"https://down.example.com/hook"})
    monkeypatch.setattr(sender_module.requests, "post", post)
    dispatcher = WebhookDispatcher(max_workers=2)
    try:
        with SessionLocal() as db:
            make_webhook(db, organization_id="org_a", url="https://down.example.com/hook")
            make_webhook(db, organization_id="org_a", url="https://up.example.com/hook")
            futures = dispatcher.dispatch(db, "org_a", "verification.failed", {"id": "v1"})
        wait(futures, timeout=5)
    finally:
        dispatcher.shutdown()

    assert sorted(f.result() for f in futures) == [False, True]
    assert {c["url"] for c in post.calls} == {
        "https://down.example.com/hook",
        "https://up.example.com/hook",
    }


def test_non_2xx_counts_as_failed_delivery(monkeypatch, tmp_path):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'webhooks.db'}")
    monkeypatch.setattr(
        sender_module.requests,
        "post",
        lambda url, data=None, headers=None, timeout=None, stream=False: _Response(500),
    )
    dispatcher = WebhookDispatcher(max_workers=1)
    try:
        with SessionLocal() as db:
            make_webhook(db, organization_id="org_a")
            futures = dispatcher.dispatch(db, "org_a", "verification.completed", {"id": "v1"})
        wait(futures, timeout=5)
    finally:
        dispatcher.shutdown()

    assert [f.result() for f in futures] == [False]


def test_no_subscribers_means_no_work(tmp_path):
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'webhooks.db'}")
    dispatcher = WebhookDispatcher(max_workers=1)
    try:
        with SessionLocal() as db:
            assert dispatcher.dispatch(db, "org_empty", "verification.completed", {}) == []
    finally:
        dispatcher.shutdown()


def test_dripping_subscriber_does_not_hold_the_pool(monkeypatch, tmp_path):
    bypass_proxies(monkeypatch)
    SessionLocal = _setup_db(f"sqlite:///{tmp_path / 'webhooks.db'}")
    dispatcher = WebhookDispatcher(timeout_seconds=0.5, max_workers=1)
    with slow_drip_server(content_length=1000, interval=0.2, duration=6.0) as slow_url, slow_drip_server(
        content_length=0,
    ) as fast_url:
        try:
            with SessionLocal() as db:
                make_webhook(db, organization_id="org_a", url=f"{slow_url}/hook")
                make_webhook(db, organization_id="org_a", url=f"{fast_url}/hook")
                started = time.monotonic()
                futures = dispatcher.dispatch(db, "org_a", "verification.completed", {"id": "v1"})
            done, not_done = wait(futures, timeout=3)
            elapsed = time.monotonic() - started
        finally:
            dispatcher.shutdown(wait=False)

    assert len(futures) == 2
    assert not not_done
    assert elapsed < 2.0
    assert [f.result() for f in futures] == [True, True]
