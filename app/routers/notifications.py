"""Notification router: list, create-and-push, mark read."""

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.notifications import ConnectionRegistry, NotificationService, get_registry
from app.modules.notifications.schemas import NotificationCreate, NotificationOut
from app.modules.users import User, UserService
from app.oauth2 import get_current_user

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service(
    db: Session = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_registry),
) -> NotificationService:
    return NotificationService(db, registry)


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return service.list_for_user(current_user.id, unread_only=unread_only)


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
async def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Store a notification for ``userId`` and push it over their socket if connected."""
    UserService(db).get_user_or_404(payload.user_id)
    return await service.notify(payload.user_id, payload.message)


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return service.mark_read(notification_id, current_user.id)
