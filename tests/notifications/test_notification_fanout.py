"""Test module for storing notifications and pushing them to live sockets."""

import asyncio

import pytest

from app.modules.notifications import NotificationService, registry
from app.modules.notifications.models import Notification


def _notify(client, headers, user_id, message, key="userId"):
    return client.post(
        "/api/notifications",
        json={key: user_id, "message": message},
        headers=headers,
    )


def test_notification_is_stored_and_pushed(
    client, session, test_user, user2_headers, fake_socket_factory
):
    """Test case for a connected recipient receiving the push."""
    socket = fake_socket_factory()
    asyncio.run(registry.register(test_user.id, socket))

    res = _notify(client, user2_headers, test_user.id, "Your course starts Monday")

    assert res.status_code == 201
    body = res.json()
    assert body["user_id"] == test_user.id
    assert body["read"] is False
    pushed = socket.events("notification")
    assert len(pushed) == 1
    assert pushed[0]["data"]["id"] == body["id"]
    assert pushed[0]["data"]["message"] == "Your course starts Monday"
    assert session.query(Notification).count() == 1


def test_offline_recipient_still_gets_stored_row(client, test_user, user_headers, user2_headers):
    """Test case for notifying a user with no socket."""
    res = _notify(client, user2_headers, test_user.id, "Stored for later", key="user_id")

    assert res.status_code == 201
    mine = client.get("/api/notifications", headers=user_headers).json()
    theirs = client.get("/api/notifications", headers=user2_headers).json()
    assert [n["message"] for n in mine] == ["Stored for later"]
    assert theirs == []


def test_notification_for_unknown_user(client, session, user_headers):
    res = _notify(client, user_headers, 98765, "Hello?")

    assert res.status_code == 404
    assert session.query(Notification).count() == 0


def test_list_is_newest_first_and_filterable(client, test_user, user_headers, user2_headers):
    """Test case for a user's own notification list."""
    first = _notify(client, user2_headers, test_user.id, "first").json()
    second = _notify(client, user2_headers, test_user.id, "second").json()
    client.patch(f"/api/notifications/{first['id']}/read", headers=user_headers)

    everything = client.get("/api/notifications", headers=user_headers).json()
    unread = client.get(
        "/api/notifications", params={"unread_only": True}, headers=user_headers
    ).json()

    assert [n["id"] for n in everything] == [second["id"], first["id"]]
    assert [n["id"] for n in unread] == [second["id"]]


def test_mark_read_by_owner(client, test_user, user_headers, user2_headers):
    """Test case for the recipient acknowledging a notification."""
    created = _notify(client, user2_headers, test_user.id, "Payment received").json()

    res = client.patch(f"/api/notifications/{created['id']}/read", headers=user_headers)
    again = client.patch(f"/api/notifications/{created['id']}/read", headers=user_headers)

    assert res.status_code == 200
    assert res.json()["read"] is True
    assert again.status_code == 200


def test_mark_read_rejects_other_users(client, test_user, user2_headers):
    """Test case for reading someone else's notification."""
    created = _notify(client, user2_headers, test_user.id, "Private").json()

    res = client.patch(f"/api/notifications/{created['id']}/read", headers=user2_headers)

    assert res.status_code == 403
    assert res.json()["error"]["code"] == "permission_denied"


def test_mark_read_unknown_notification(client, user_headers):
    res = client.patch("/api/notifications/5555/read", headers=user_headers)
    assert res.status_code == 404


def test_notifications_need_a_token(client):
    assert client.get("/api/notifications").status_code == 401


@pytest.mark.asyncio
async def test_failed_push_keeps_row_and_drops_socket(session, test_user, fake_socket_factory):
    """Test case for a broken socket being forgotten after a failed push."""
    broken = fake_socket_factory(fail=True)
    await registry.register(test_user.id, broken)

    notification = await NotificationService(session).notify(test_user.id, "Are you there?")

    assert notification.id is not None
    assert registry.lookup(test_user.id) is None
    assert session.query(Notification).filter(Notification.id == notification.id).one()
