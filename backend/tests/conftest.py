from __future__ import annotations

import os
import tempfile

# Set test environment BEFORE importing tagsync modules.
# tagsync.db creates the engine at module level using get_settings().db_url,
# so we must override the env vars before any tagsync imports.
_test_tmp = tempfile.mkdtemp(prefix="tagsync-test-")
os.environ.setdefault("DATA_DIR", os.path.join(_test_tmp, "data"))
os.environ.setdefault("DB_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import tagsync.models  # noqa: F401 — register SQLModel tables
from tagsync.db import get_session
from tagsync.main import app as fastapi_app
from tagsync.services.sharing import SharingService
from tagsync.services.sync import SyncService
from tagsync.services.tags import TagNamespace, TagService

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


# ── Database fixtures ─────────────────────────────────────────────────


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite engine for testing.

    Uses StaticPool so every connection shares the same in-memory database.
    Recreates tables per test for full isolation.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    """Provide a fresh session per test."""
    with Session(engine) as session:
        yield session


# ── Service fixtures ──────────────────────────────────────────────────


@pytest.fixture(name="tags")
def tags_fixture(session) -> TagService:
    return TagService(session, TagNamespace.OWNED)


@pytest.fixture(name="shared_tags")
def shared_tags_fixture(session) -> TagService:
    return TagService(session, TagNamespace.SHARED)


@pytest.fixture(name="sync")
def sync_fixture(session) -> SyncService:
    return SyncService(session)


@pytest.fixture(name="sharing")
def sharing_fixture(session) -> SharingService:
    return SharingService(session)


@pytest.fixture(name="make_tag")
def make_tag_fixture(tags):
    """Create an owned tag with sensible defaults; returns the stored document."""

    def _make(
        text: str = "groceries",
        user_id: str = USER_ID,
        create_ts: int = 100,
        service: TagService | None = None,
        **kwargs,
    ) -> dict:
        svc = service or tags
        return svc.create(
            kwargs.pop("device_id", "device-a"),
            kwargs.pop("local_id", "local-1"),
            user_id,
            text,
            kwargs.pop("enc_key", "key-blob"),
            kwargs.pop("enc_config", "cfg-blob"),
            create_ts,
            kwargs.pop("schema_version", 1),
            **kwargs,
        )

    return _make


# ── HTTP client fixtures ──────────────────────────────────────────────


@pytest.fixture(name="client")
def client_fixture(session):
    """FastAPI TestClient with overridden DB session, acting as USER_ID."""

    def _get_session_override():
        yield session

    fastapi_app.dependency_overrides[get_session] = _get_session_override
    with TestClient(fastapi_app, headers={"X-User-Id": USER_ID}) as client:
        yield client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(name="other_client")
def other_client_fixture(session):
    """Same database as ``client`` but acting as OTHER_USER_ID."""

    def _get_session_override():
        yield session

    fastapi_app.dependency_overrides[get_session] = _get_session_override
    with TestClient(fastapi_app, headers={"X-User-Id": OTHER_USER_ID}) as client:
        yield client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture(name="client_no_auth")
def client_no_auth_fixture(session):
    """TestClient with DB override but no identity header — for testing 401s."""

    def _get_session_override():
        yield session

    fastapi_app.dependency_overrides[get_session] = _get_session_override
    with TestClient(fastapi_app) as tc:
        yield tc
    fastapi_app.dependency_overrides.clear()
