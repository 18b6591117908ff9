import json

import anyio
from fastapi.testclient import TestClient as FastAPITestClient


class TestClient(FastAPITestClient):
    """
    Wrapper around FastAPI's TestClient that force-closes lifespan streams to
    avoid lingering ResourceWarning noise, plus helpers for the event socket.
    """

    __test__ = False

    def __exit__(self, *args):
        result = super().__exit__(*args)
        for stream_name in ("stream_send", "stream_receive"):
            stream = getattr(self, stream_name, None)
            if stream:
                try:
                    anyio.run(stream.aclose)
                except Exception:
                    pass
        return result


def emit(websocket, event: str, data=None) -> None:
    """Send one ``{"event", "data"}`` frame over a test websocket session."""
    websocket.send_text(json.dumps({"event": event, "data": data}))


def receive_event(websocket) -> dict:
    frame = websocket.receive_json()
    assert set(frame) == {"event", "data"}
    return frame
