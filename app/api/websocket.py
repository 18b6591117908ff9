"""WebSocket endpoint for real-time notifications and chat rooms.

Frames in both directions are JSON objects ``{"event": ..., "data": ...}``.

Client events:
- ``identify`` (data = user id): route personal notifications to this socket.
  When a ``token`` query parameter was supplied, only the token's user may be
  claimed.
- ``join-room`` / ``leave-room`` (data = room name).
- ``send-message`` (data = message object carrying ``room``).
- ``typing`` / ``stop-typing`` (data = ``{"room", "user"}``).

Server events: ``identified``, ``notification``, ``load-messages``,
``new-message``, ``user-typing`` and ``error``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from app import oauth2
from app.core.exceptions import InvalidTokenException
from app.modules.notifications import ConnectionRegistry, get_registry
from app.modules.notifications.common import build_event

router = APIRouter()
logger = logging.getLogger(__name__)


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json(build_event("error", {"message": message}))


def _room_name(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        data = data.get("room")
    if isinstance(data, (str, int)) and str(data).strip():
        return str(data).strip()
    return None


async def _handle_identify(
    websocket: WebSocket,
    registry: ConnectionRegistry,
    data: Any,
    token_user_id: Optional[int],
) -> None:
    try:
        user_id = int(data["userId"] if isinstance(data, dict) else data)
    except (KeyError, TypeError, ValueError):
        await _send_error(websocket, "identify expects a user id")
        return
    if token_user_id is not None and user_id != token_user_id:
        await _send_error(websocket, "identify does not match the authenticated user")
        return
    await registry.register(user_id, websocket)
    await websocket.send_json(build_event("identified", {"userId": user_id}))


async def _dispatch(
    websocket: WebSocket,
    registry: ConnectionRegistry,
    event: str,
    data: Any,
    token_user_id: Optional[int],
) -> None:
    if event == "identify":
        await _handle_identify(websocket, registry, data, token_user_id)
        return

    room = _room_name(data)
    if event in {"join-room", "leave-room", "send-message", "typing", "stop-typing"} and room is None:
        await _send_error(websocket, f"{event} requires a room")
        return

    if event == "join-room":
        history = await registry.join_room(room, websocket)
        await websocket.send_json(build_event("load-messages", history))
    elif event == "leave-room":
        await registry.leave_room(room, websocket)
    elif event == "send-message":
        if not isinstance(data, dict):
            await _send_error(websocket, "send-message expects a message object")
            return
        await registry.publish(room, data)
    elif event in {"typing", "stop-typing"}:
        user = data.get("user") if isinstance(data, dict) else None
        await registry.relay_typing(room, websocket, typing=event == "typing", user=user)
    else:
        await _send_error(websocket, f"Unknown event: {event}")


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: Optional[str] = Query(None, description="Bearer token for socket auth"),
):
    """Serve one client socket until it disconnects."""
    registry = get_registry()

    token_user_id: Optional[int] = None
    if token:
        try:
            token_user_id = oauth2.verify_access_token(token).id
        except InvalidTokenException:
            await websocket.close(code=4401, reason="Invalid authentication token")
            return

    await websocket.accept()
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                await _send_error(websocket, "Frames must be JSON objects")
                continue
            if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
                await _send_error(websocket, "Frames need an 'event' field")
                continue
            await _dispatch(
                websocket, registry, frame["event"], frame.get("data"), token_user_id
            )
    except WebSocketDisconnect as exc:
        logger.info("WebSocket disconnected (code=%s)", getattr(exc, "code", "unknown"))
    except Exception as exc:
        logger.exception("WebSocket error: %s", exc)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
    finally:
        await registry.deregister(websocket)


__all__ = ["router"]
