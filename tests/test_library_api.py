import pytest


@pytest.fixture
def signed_in(make_user, login):
    user = make_user("alice")
    login("alice")
    return user


def test_library_requires_session(client):
    assert client.get("/api/favorites").status_code == 401
    assert client.post("/api/watch-history", json={"tmdbId": 1, "title": "Up"}).status_code == 401


def test_toggle_favorite(client, signed_in):
    media = {"tmdbId": 603, "imdbId": "tt0133093", "title": "The Matrix", "year": "1999", "mediaType": "movie"}

    added = client.post("/api/favorites/toggle", json=media)
    assert added.json() == {"success": True, "favorited": True}

    [favorite] = client.get("/api/favorites").json()["favorites"]
    assert favorite["tmdbId"] == 603
    assert favorite["title"] == "The Matrix"

    removed = client.post("/api/favorites/toggle", json=media)
    assert removed.json()["favorited"] is False
    assert client.get("/api/favorites").json()["favorites"] == []


def test_delete_favorite(client, signed_in):
    client.post("/api/favorites/toggle", json={"tmdbId": 1399, "title": "Game of Thrones", "mediaType": "tv"})

    assert client.delete("/api/favorites/1399").status_code == 200
    assert client.get("/api/favorites").json()["favorites"] == []


def test_favorite_rejects_unknown_media_type(client, signed_in):
    response = client.post("/api/favorites/toggle", json={"tmdbId": 1, "title": "X", "mediaType": "book"})

    assert response.status_code == 400


def test_watch_history_is_capped_most_recent_first(client, signed_in):
    for tmdb_id in range(1, 23):
        response = client.post("/api/watch-history", json={"tmdbId": tmdb_id, "title": f"Film {tmdb_id}"})
        assert response.status_code == 200

    history = client.get("/api/watch-history").json()["watchHistory"]

    assert len(history) == 20
    assert [entry["tmdbId"] for entry in history] == list(range(22, 2, -1))


def test_rewatch_moves_entry_to_top(client, signed_in):
    client.post("/api/watch-history", json={"tmdbId": 1, "title": "Breaking Bad", "mediaType": "tv", "seasonNumber": 1})
    client.post("/api/watch-history", json={"tmdbId": 2, "title": "Heat"})
    client.post(
        "/api/watch-history",
        json={"tmdbId": 1, "title": "Breaking Bad", "mediaType": "tv", "seasonNumber": 2, "episodeNumber": 3},
    )

    history = client.get("/api/watch-history").json()["watchHistory"]

    assert [entry["tmdbId"] for entry in history] == [1, 2]
    assert history[0]["seasonNumber"] == 2
    assert history[0]["episodeNumber"] == 3


def test_leaderboard(client, make_user, login):
    make_user("alice")
    make_user("bob")

    login("alice")
    client.post("/api/watch-history", json={"tmdbId": 1, "title": "Heat", "runtime": 170})

    login("bob")
    for tmdb_id in (2, 3, 4):
        client.post("/api/watch-history", json={"tmdbId": tmdb_id, "title": "Movie", "runtime": 120})
    guest = client.post("/api/auth/guest", json={"password": "movie-night"}).json()["user"]

    board = client.get("/api/leaderboard").json()["data"]

    assert [row["username"] for row in board[:2]] == ["bob", "alice"]
    assert board[0]["totalWatchHours"] == 6
    assert board[0]["totalWatched"] == 3
    assert board[1]["totalWatchHours"] == 3
    assert board[2]["username"] == f"User-{guest['id'][:8]}"
    assert board[2]["totalWatchHours"] == 0
