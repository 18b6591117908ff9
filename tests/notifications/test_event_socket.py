"""Test module for the /ws event socket."""

import pytest
from starlette.websockets import WebSocketDisconnect

from tests.testclient import emit, receive_event


def test_identify_then_receive_notification(client, test_user, user2_headers):
    """Test case for a notification created over HTTP arriving on the socket."""
    with client.websocket_connect("/ws") as ws:
        emit(ws, "identify", test_user.id)
        assert receive_event(ws) == {"event": "identified", "data": {"userId": test_user.id}}

        res = client.post(
            "/api/notifications",
            json={"userId": test_user.id, "message": "Welcome aboard"},
            headers=user2_headers,
        )
        assert res.status_code == 201

        frame = receive_event(ws)
        assert frame["event"] == "notification"
        assert frame["data"]["message"] == "Welcome aboard"
        assert frame["data"]["id"] == res.json()["id"]


def test_identify_with_token_must_match(client, test_user, test_user2, token):
    """Test case for an authenticated socket claiming another user."""
    with client.websocket_connect(f"/ws?token={token}") as ws:
        emit(ws, "identify", test_user2.id)
        frame = receive_event(ws)
        assert frame["event"] == "error"

        emit(ws, "identify", {"userId": test_user.id})
        assert receive_event(ws)["event"] == "identified"


def test_invalid_token_is_rejected(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws?token=garbage"):
            pass
    assert exc_info.value.code == 4401


def test_room_chat_round_trip(client):
    """Test case for joining a room, chatting and replaying history."""
    with client.websocket_connect("/ws") as alice:
        emit(alice, "join-room", "course-12")
        assert receive_event(alice) == {"event": "load-messages", "data": []}

        emit(alice, "send-message", {"room": "course-12", "user": "alice", "text": "Habari!"})
        echoed = receive_event(alice)
        assert echoed["event"] == "new-message"
        assert echoed["data"]["text"] == "Habari!"

        with client.websocket_connect("/ws") as bob:
            emit(bob, "join-room", {"room": "course-12"})
            history = receive_event(bob)
            assert history["event"] == "load-messages"
            assert [m["text"] for m in history["data"]] == ["Habari!"]

            emit(bob, "typing", {"room": "course-12", "user": "bob"})
            typing = receive_event(alice)
            assert typing == {
                "event": "user-typing",
                "data": {"room": "course-12", "user": "bob", "typing": True},
            }


def test_bad_frames_get_error_events(client):
    """Test case for malformed and unknown client events."""
    with client.websocket_connect("/ws") as ws:
        ws.send_text("not json")
        assert receive_event(ws)["event"] == "error"

        emit(ws, "dance")
        frame = receive_event(ws)
        assert frame == {"event": "error", "data": {"message": "Unknown event: dance"}}

        emit(ws, "join-room", None)
        assert receive_event(ws)["data"]["message"] == "join-room requires a room"
