"""Notification persistence and real-time fan-out."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import PermissionDeniedException, ResourceNotFoundException
from app.modules.notifications import models as notification_models

from .common import logger, notification_payload
from .realtime import ConnectionRegistry, registry as default_registry
from .repository import NotificationRepository


class NotificationService:
    """Persist notifications and push them to the addressed user's socket."""

    def __init__(self, db: Session, registry: Optional[ConnectionRegistry] = None):
        self.db = db
        self.repository = NotificationRepository(db)
        self.registry = registry or default_registry

    async def notify(self, user_id: int, message: str) -> notification_models.Notification:
        """Store a notification, then push it if the user has a live socket.

        The row is committed before delivery is attempted, so an offline user
        still finds it in their list later.
        """
        notification = self.repository.create_notification(user_id=user_id, message=message)
        delivered = await self.registry.send(
            user_id, "notification", notification_payload(notification)
        )
        logger.info(
            "Notification %s stored for user %s (pushed=%s)",
            notification.id,
            user_id,
            delivered,
        )
        return notification

    def list_for_user(self, user_id: int, *, unread_only: bool = False) -> List[notification_models.Notification]:
        return self.repository.list_for_user(user_id, unread_only=unread_only)

    def mark_read(self, notification_id: int, user_id: int) -> notification_models.Notification:
        """Mark a single notification as read; only its recipient may do so."""
        notification = self.repository.get_notification(notification_id)
        if not notification:
            raise ResourceNotFoundException("Notification", notification_id)
        if notification.user_id != user_id:
            raise PermissionDeniedException("You can only update your own notifications")
        return self.repository.mark_read(notification)


__all__ = ["NotificationService"]
