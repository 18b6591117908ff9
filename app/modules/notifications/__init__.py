"""Notifications domain package."""

from .models import Notification
from .realtime import ConnectionRegistry, get_registry, registry
from .service import NotificationService

__all__ = [
    "ConnectionRegistry",
    "registry",
    "get_registry",
    "Notification",
    "NotificationService",
]
