"""Tests for the favorites router."""

from unittest.mock import patch

from tests.conftest import auth_headers, register_and_verify_user


class TestFavorites:
    def test_add_check_list_remove(self, client):
        test_client, _ = client
        session = register_and_verify_user(test_client, "alice@x.com")
        headers = auth_headers(session["access_token"])
        params = {"content_id": "ep-1", "content_type": "episode"}

        assert test_client.get("/api/favorites", params=params, headers=headers).json() == {
            "is_favorite": False
        }

        response = test_client.post("/api/favorites", json=params, headers=headers)
        assert response.status_code == 201
        assert response.json() == {"message": "Added to favorites"}

        again = test_client.post("/api/favorites", json=params, headers=headers)
        assert again.status_code == 200
        assert again.json() == {"message": "Already in favorites"}

        assert test_client.get("/api/favorites", params=params, headers=headers).json() == {
            "is_favorite": True
        }
        favorites = test_client.get("/api/favorites/list", headers=headers).json()["favorites"]
        assert [(f["content_type"], f["content_id"]) for f in favorites] == [("episode", "ep-1")]

        response = test_client.delete("/api/favorites", params=params, headers=headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Removed from favorites"}

        response = test_client.delete("/api/favorites", params=params, headers=headers)
        assert response.status_code == 404

    def test_list_filtered_by_type(self, client):
        test_client, _ = client
        session = register_and_verify_user(test_client, "alice@x.com")
        headers = auth_headers(session["access_token"])
        test_client.post("/api/favorites", json={"content_id": "ep-1", "content_type": "episode"}, headers=headers)
        test_client.post("/api/favorites", json={"content_id": "ar-1", "content_type": "article"}, headers=headers)

        favorites = test_client.get(
            "/api/favorites/list", params={"content_type": "article"}, headers=headers
        ).json()["favorites"]

        assert [f["content_id"] for f in favorites] == ["ar-1"]

    def test_favorites_are_per_user(self, client):
        test_client, _ = client
        alice = register_and_verify_user(test_client, "alice@x.com")
        bob = register_and_verify_user(test_client, "bob@x.com", name="Bob")
        params = {"content_id": "ep-1", "content_type": "episode"}
        test_client.post("/api/favorites", json=params, headers=auth_headers(alice["access_token"]))

        response = test_client.get("/api/favorites", params=params, headers=auth_headers(bob["access_token"]))

        assert response.json() == {"is_favorite": False}

    def test_unknown_content_type(self, client):
        test_client, _ = client
        session = register_and_verify_user(test_client, "alice@x.com")

        response = test_client.post(
            "/api/favorites",
            json={"content_id": "x", "content_type": "podcast"},
            headers=auth_headers(session["access_token"]),
        )

        assert response.status_code == 400

    def test_concurrent_duplicate_add_is_idempotent(self, client):
        test_client, _ = client
        session = register_and_verify_user(test_client, "alice@x.com")
        headers = auth_headers(session["access_token"])
        params = {"content_id": "ep-1", "content_type": "episode"}
        test_client.post("/api/favorites", json=params, headers=headers)

        # The existence check misses the row another request just inserted
        with patch("fazlaka.routers.favorites.FavoriteRepository.find", return_value=None):
            response = test_client.post("/api/favorites", json=params, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Already in favorites"}
        favorites = test_client.get("/api/favorites/list", headers=headers).json()["favorites"]
        assert len(favorites) == 1
