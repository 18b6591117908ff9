"""WebSocket connection management for real-time notifications and chat rooms."""

from __future__ import annotations

import asyncio
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Set

from fastapi import WebSocket

from app.core.config import settings

from .common import build_event, logger


class ConnectionRegistry:
    """Maps user ids to their live socket and tracks chat-room membership.

    Each user has at most one registered connection: identifying again from a
    new tab replaces the older mapping, so only the newest tab receives
    personal pushes. A connection keeps its room memberships regardless of
    which user it is registered for.
    """

    def __init__(self, *, history_limit: int = 50) -> None:
        self._connections: Dict[int, WebSocket] = {}
        self._owners: Dict[int, int] = {}
        self._rooms: Dict[str, Set[WebSocket]] = {}
        self._history: Dict[str, Deque[dict]] = {}
        self._lock = asyncio.Lock()
        self.history_limit = history_limit

    # ------------------------------------------------------------ identity
    async def register(self, user_id: int, websocket: WebSocket) -> Optional[WebSocket]:
        """Bind ``websocket`` to ``user_id`` and return the connection it replaced."""
        async with self._lock:
            previous = self._connections.get(user_id)
            if previous is not None and previous is not websocket:
                self._owners.pop(id(previous), None)
            stale_user = self._owners.get(id(websocket))
            if stale_user is not None and stale_user != user_id:
                if self._connections.get(stale_user) is websocket:
                    self._connections.pop(stale_user, None)
            self._connections[user_id] = websocket
            self._owners[id(websocket)] = user_id
        if previous is not None and previous is not websocket:
            logger.info("Socket for user %s replaced by a newer connection", user_id)
        else:
            logger.info("Socket registered for user %s", user_id)
        return previous if previous is not websocket else None

    async def deregister(self, websocket: WebSocket) -> Optional[int]:
        """Forget ``websocket`` everywhere; a newer mapping for its user survives."""
        async with self._lock:
            user_id = self._owners.pop(id(websocket), None)
            if user_id is not None and self._connections.get(user_id) is websocket:
                self._connections.pop(user_id, None)
            for room, members in list(self._rooms.items()):
                members.discard(websocket)
                if not members:
                    self._rooms.pop(room, None)
        if user_id is not None:
            logger.info("Socket deregistered for user %s", user_id)
        return user_id

    def lookup(self, user_id: int) -> Optional[WebSocket]:
        return self._connections.get(user_id)

    def user_for(self, websocket: WebSocket) -> Optional[int]:
        return self._owners.get(id(websocket))

    # ------------------------------------------------------------- delivery
    async def send(self, user_id: int, event: str, data: Any = None) -> bool:
        """Push one event to the user's socket. Returns False when nobody is listening."""
        websocket = self.lookup(user_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json(build_event(event, data))
        except Exception as exc:
            logger.error("Error sending %s to user %s: %s", event, user_id, exc)
            await self.deregister(websocket)
            return False
        return True

    async def _send_many(self, targets: List[WebSocket], frame: dict) -> None:
        broken: List[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_json(frame)
            except Exception as exc:
                logger.error("Error relaying %s: %s", frame.get("event"), exc)
                broken.append(websocket)
        for websocket in broken:
            await self.deregister(websocket)

    # ---------------------------------------------------------------- rooms
    async def join_room(self, room: str, websocket: WebSocket) -> List[dict]:
        """Add ``websocket`` to ``room`` and return the room's recent messages."""
        async with self._lock:
            self._rooms.setdefault(room, set()).add(websocket)
            history = list(self._history.get(room, ()))
        logger.debug("Socket joined room %s", room)
        return history

    async def leave_room(self, room: str, websocket: WebSocket) -> None:
        async with self._lock:
            members = self._rooms.get(room)
            if members is None:
                return
            members.discard(websocket)
            if not members:
                self._rooms.pop(room, None)

    def room_members(self, room: str) -> Set[WebSocket]:
        return set(self._rooms.get(room, ()))

    def history(self, room: str) -> List[dict]:
        return list(self._history.get(room, ()))

    async def publish(self, room: str, message: Dict[str, Any]) -> dict:
        """Store ``message`` in the room history and relay it as ``new-message``."""
        stored = dict(message)
        stored["room"] = room
        stored.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        async with self._lock:
            history = self._history.get(room)
            if history is None:
                history = deque(maxlen=self.history_limit)
                self._history[room] = history
            history.append(stored)
            targets = list(self._rooms.get(room, ()))
        await self._send_many(targets, build_event("new-message", stored))
        return stored

    async def relay_typing(
        self,
        room: str,
        sender: WebSocket,
        *,
        typing: bool,
        user: Optional[str] = None,
    ) -> None:
        """Tell the other room members that ``sender`` started or stopped typing."""
        targets = [ws for ws in self.room_members(room) if ws is not sender]
        payload = {"room": room, "user": user, "typing": typing}
        await self._send_many(targets, build_event("user-typing", payload))

    def clear(self) -> None:
        """Drop every mapping, membership and stored message."""
        self._connections.clear()
        self._owners.clear()
        self._rooms.clear()
        self._history.clear()

    def metrics(self) -> dict:
        """Return a snapshot suitable for logging."""
        return {
            "active_users": len(self._connections),
            "rooms": {room: len(members) for room, members in self._rooms.items()},
        }


registry = ConnectionRegistry(history_limit=settings.CHAT_HISTORY_LIMIT)


def get_registry() -> ConnectionRegistry:
    """FastAPI dependency returning the process-wide registry."""
    return registry


__all__ = ["ConnectionRegistry", "registry", "get_registry"]
