"""Tests for the notifications router."""

import pytest

from tests.conftest import auth_headers, register_and_verify_user


@pytest.fixture
def alice(client):
    test_client, _ = client
    session = register_and_verify_user(test_client, "alice@x.com")
    return test_client, auth_headers(session["access_token"])


def _create(test_client, headers, title="New episode"):
    response = test_client.post(
        "/api/notifications",
        json={"title": title, "message": "Listen now", "type": "info", "related_type": "episode"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


class TestNotifications:
    def test_list_counts_unread(self, alice):
        test_client, headers = alice
        _create(test_client, headers)

        response = test_client.get("/api/notifications", headers=headers)

        assert response.status_code == 200
        body = response.json()
        # login greeting plus the one created above
        assert len(body["notifications"]) == 2
        assert body["unread_count"] == 2
        assert "New episode" in [n["title"] for n in body["notifications"]]

    def test_mark_read(self, alice):
        test_client, headers = alice
        created = _create(test_client, headers)

        response = test_client.patch(f"/api/notifications/{created['id']}/read", headers=headers)

        assert response.status_code == 200
        assert response.json()["is_read"] is True
        assert response.json()["read_at"] is not None
        assert test_client.get("/api/notifications", headers=headers).json()["unread_count"] == 1

    def test_mark_all_read(self, alice):
        test_client, headers = alice
        _create(test_client, headers)

        response = test_client.patch("/api/notifications/read-all", headers=headers)

        assert response.status_code == 200
        assert response.json()["count"] == 2
        assert test_client.get("/api/notifications", headers=headers).json()["unread_count"] == 0

    def test_delete_and_clear(self, alice):
        test_client, headers = alice
        created = _create(test_client, headers)

        response = test_client.delete(f"/api/notifications/{created['id']}", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Notification deleted"}

        response = test_client.delete("/api/notifications/clear-all", headers=headers)
        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert test_client.get("/api/notifications", headers=headers).json()["notifications"] == []

    def test_other_users_notification_is_not_found(self, client):
        test_client, _ = client
        alice = register_and_verify_user(test_client, "alice@x.com")
        bob = register_and_verify_user(test_client, "bob@x.com", name="Bob")
        created = _create(test_client, auth_headers(alice["access_token"]))
        bob_headers = auth_headers(bob["access_token"])

        read = test_client.patch(f"/api/notifications/{created['id']}/read", headers=bob_headers)
        delete = test_client.delete(f"/api/notifications/{created['id']}", headers=bob_headers)

        assert read.status_code == delete.status_code == 404
        assert read.json() == {"error": "Notification not found"}

        alice_view = test_client.get(
            "/api/notifications", headers=auth_headers(alice["access_token"])
        ).json()
        assert created["id"] in [n["id"] for n in alice_view["notifications"]]

    def test_invalid_type_rejected(self, alice):
        test_client, headers = alice

        response = test_client.post(
            "/api/notifications",
            json={"title": "x", "message": "y", "type": "urgent"},
            headers=headers,
        )

        assert response.status_code == 400

    def test_requires_session(self, client):
        test_client, _ = client

        response = test_client.get("/api/notifications")

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
