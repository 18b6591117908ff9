"""HTTP and WebSocket routers mounted by the app factory.

``api_router`` carries every REST route under ``/api``; ``websocket_router``
serves the ``/ws`` event socket.
"""

from .router import api_router
from .websocket import router as websocket_router

__all__ = ["api_router", "websocket_router"]
