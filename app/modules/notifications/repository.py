"""Data-access helpers for notifications domain."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from app.modules.notifications import models as notification_models


class NotificationRepository:
    """Encapsulate notification-specific database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create_notification(self, *, user_id: int, message: str) -> notification_models.Notification:
        notification = notification_models.Notification(user_id=user_id, message=message)
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_notification(self, notification_id: int) -> Optional[notification_models.Notification]:
        return (
            self.db.query(notification_models.Notification)
            .filter(notification_models.Notification.id == notification_id)
            .first()
        )

    def list_for_user(self, user_id: int, *, unread_only: bool = False) -> List[notification_models.Notification]:
        query = self.db.query(notification_models.Notification).filter(
            notification_models.Notification.user_id == user_id
        )
        if unread_only:
            query = query.filter(notification_models.Notification.read.is_(False))
        return query.order_by(
            notification_models.Notification.created_at.desc(),
            notification_models.Notification.id.desc(),
        ).all()

    def mark_read(self, notification: notification_models.Notification) -> notification_models.Notification:
        if not notification.read:
            notification.read = True
            self.db.commit()
            self.db.refresh(notification)
        return notification


__all__ = ["NotificationRepository"]
