from typing import Generator

from fastapi import BackgroundTasks, Depends
from sqlalchemy.orm import Session

from postgate.core.approval import ApprovalService
from postgate.core.config import get_settings
from postgate.core.settings_store import SettingsStore
from postgate.core.tasks import BackgroundTaskDispatcher
from postgate.db.session import SessionLocal
from postgate.services.callbacks import CallbackDispatcher
from postgate.services.notifications import NotificationDispatcher


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_notifier() -> NotificationDispatcher:
    """Reviewer notification dispatcher; opens its own sessions."""
    return NotificationDispatcher(SessionLocal, get_settings())


def get_callback_dispatcher() -> CallbackDispatcher:
    return CallbackDispatcher(get_settings())


def get_approval_service(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
    callbacks: CallbackDispatcher = Depends(get_callback_dispatcher),
) -> ApprovalService:
    """Approval service wired with request-scoped background tasks."""
    return ApprovalService(
        db,
        notifier=notifier,
        callbacks=callbacks,
        tasks=BackgroundTaskDispatcher(background_tasks),
    )


def get_settings_store(db: Session = Depends(get_db)) -> SettingsStore:
    return SettingsStore(db)
