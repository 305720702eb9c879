"""Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database. Outbound HTTP from the
notification and callback dispatchers goes through ``RecordingTransport``
instances so tests can inspect what was sent.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import postgate.db.models  # noqa: F401  register models on Base.metadata
from postgate.api.deps import get_callback_dispatcher, get_db, get_notifier
from postgate.api.main import app
from postgate.core.approval import ApprovalService
from postgate.core.config import Settings
from postgate.db.base import Base
from postgate.services.callbacks import CallbackDispatcher
from postgate.services.notifications import NotificationDispatcher
from tests.helpers import RecordingTaskDispatcher, RecordingTransport


@pytest.fixture
def db_engine():
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
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app_settings():
    return Settings(
        _env_file=None,
        app_url="http://gateway.test",
        discord_webhook_url=None,
        webhook_timeout=5,
    )


@pytest.fixture
def webhook_transport():
    """Transport standing in for the Discord webhook."""
    return RecordingTransport()


@pytest.fixture
def callback_transport():
    """Transport standing in for the downstream callback URL."""
    return RecordingTransport()


@pytest.fixture
def notifier(session_factory, app_settings, webhook_transport):
    return NotificationDispatcher(session_factory, app_settings, transport=webhook_transport.transport)


@pytest.fixture
def callbacks(app_settings, callback_transport):
    return CallbackDispatcher(app_settings, transport=callback_transport.transport)


@pytest.fixture
def task_recorder():
    return RecordingTaskDispatcher()


@pytest.fixture
def approval_service(db_session, notifier, callbacks, task_recorder):
    return ApprovalService(db_session, notifier=notifier, callbacks=callbacks, tasks=task_recorder)


@pytest.fixture
def client(session_factory, notifier, callbacks):
    """TestClient wired to the test database and recording transports."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_callback_dispatcher] = lambda: callbacks
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
