"""Shared helpers and state for the notifications domain."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger("app.notifications")


def build_event(event: str, data: Any = None) -> Dict[str, Any]:
    """Wrap a payload in the ``{"event", "data"}`` envelope used on the socket."""
    return {"event": event, "data": jsonable_encoder(data)}


def notification_payload(notification) -> Dict[str, Any]:
    """Serialize a Notification row for socket pushes."""
    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "message": notification.message,
        "read": bool(notification.read),
        "created_at": notification.created_at,
    }


__all__ = ["logger", "build_event", "notification_payload"]
