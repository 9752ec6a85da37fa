"""Tests for the comments router."""

from tests.conftest import auth_headers, register_and_verify_user


def _comment(test_client, headers, content="Great episode", **target):
    target = target or {"episode_id": "ep-1"}
    return test_client.post("/api/comments", json={"content": content, **target}, headers=headers)


class TestComments:
    def test_thread_with_reply(self, client):
        test_client, _ = client
        session = register_and_verify_user(test_client, "alice@x.com")
        headers = auth_headers(session["access_token"])

        parent = _comment(test_client, headers)
        assert parent.status_code == 201
        assert parent.json()["name"] == "Alice"

        reply = _comment(
            test_client, headers, content="Agreed", episode_id="ep-1", parent_comment_id=parent.json()["id"]
        )
        assert reply.status_code == 201

        response = test_client.get("/api/comments", params={"episode_id": "ep-1"})
        assert response.status_code == 200
        threads = response.json()["comments"]
        assert len(threads) == 1
        assert threads[0]["content"] == "Great episode"
        assert [r["content"] for r in threads[0]["replies"]] == ["Agreed"]

    def test_listing_needs_exactly_one_target(self, client):
        test_client, _ = client

        assert test_client.get("/api/comments").status_code == 400
        assert test_client.get(
            "/api/comments", params={"episode_id": "ep-1", "article_id": "ar-1"}
        ).status_code == 400

    def test_reply_rules(self, client):
        test_client, _ = client
        session = register_and_verify_user(test_client, "alice@x.com")
        headers = auth_headers(session["access_token"])
        parent_id = _comment(test_client, headers).json()["id"]
        reply_id = _comment(
            test_client, headers, content="Reply", episode_id="ep-1", parent_comment_id=parent_id
        ).json()["id"]

        nested = _comment(test_client, headers, content="Deeper", episode_id="ep-1", parent_comment_id=reply_id)
        elsewhere = _comment(test_client, headers, content="Wrong", article_id="ar-1", parent_comment_id=parent_id)
        missing = _comment(test_client, headers, content="Lost", episode_id="ep-1", parent_comment_id="nope")

        assert nested.status_code == 400
        assert elsewhere.status_code == 400
        assert missing.status_code == 404

    def test_only_author_deletes(self, client):
        test_client, _ = client
        alice = register_and_verify_user(test_client, "alice@x.com")
        bob = register_and_verify_user(test_client, "bob@x.com", name="Bob")
        alice_headers = auth_headers(alice["access_token"])
        parent_id = _comment(test_client, alice_headers).json()["id"]
        _comment(test_client, alice_headers, content="Reply", episode_id="ep-1", parent_comment_id=parent_id)

        response = test_client.delete(f"/api/comments/{parent_id}", headers=auth_headers(bob["access_token"]))
        assert response.status_code == 403

        response = test_client.delete(f"/api/comments/{parent_id}", headers=alice_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Comment deleted"}
        assert test_client.get("/api/comments", params={"episode_id": "ep-1"}).json()["comments"] == []

        response = test_client.delete(f"/api/comments/{parent_id}", headers=alice_headers)
        assert response.status_code == 404

    def test_requires_session_to_post(self, client):
        test_client, _ = client

        response = test_client.post("/api/comments", json={"content": "Hi", "episode_id": "ep-1"})

        assert response.status_code == 401

    def test_blank_content_rejected(self, client):
        test_client, _ = client
        session = register_and_verify_user(test_client, "alice@x.com")

        response = _comment(test_client, auth_headers(session["access_token"]), content="   ")

        assert response.status_code == 400
