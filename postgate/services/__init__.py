"""Outbound integrations for PostGate."""

from postgate.services.callbacks import CallbackDispatcher
from postgate.services.notifications import NotificationDispatcher

__all__ = [
    "CallbackDispatcher",
    "NotificationDispatcher",
]
