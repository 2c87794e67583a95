"""Integration tests for /api/playlists and /api/playlists/{id}/tracks."""

import pytest
from httpx import AsyncClient

from tests.factories import (
    PLAYLIST_ID,
    TRACK_ID,
    USER_ID,
    auth_error,
    make_entry,
    make_playlist,
    make_track,
    no_rows_error,
    query_error,
)
from tests.fakes import FakeSupabase

OTHER_TRACK_ID = "1a2b3c4d-5e6f-4a7b-8c9d-0e1f2a3b4c5d"


# ---------------------------------------------------------------------------
# 1. Authentication
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_requires_session(client: AsyncClient, supabase: FakeSupabase) -> None:
    resp = await client.get("/api/playlists")

    assert resp.status_code == 401
    assert resp.json() == {
        "error": "Unauthorized",
        "message": "Authentication required",
        "code": "UNAUTHORIZED",
    }
    assert supabase.call_count == 0


@pytest.mark.asyncio
async def test_rejected_token_is_unauthorized(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    supabase.auth.get_user.side_effect = auth_error("invalid JWT", 401)

    resp = await user_client.get("/api/playlists")

    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid authentication"
    assert supabase.queries == []


@pytest.mark.asyncio
async def test_session_cookie_is_accepted(client: AsyncClient, supabase: FakeSupabase) -> None:
    supabase.script("playlists", [])

    resp = await client.get("/api/playlists", headers={"Cookie": "sb-access-token=cookie-jwt"})

    assert resp.status_code == 200
    supabase.auth.get_user.assert_awaited_once_with("cookie-jwt")


# ---------------------------------------------------------------------------
# 2. Collection
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_list_playlists_scoped_to_user(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    supabase.script("playlists", [make_playlist(id="p1", name="Gym")])

    resp = await user_client.get("/api/playlists")

    assert resp.status_code == 200
    assert resp.json()["playlists"] == [make_playlist(id="p1", name="Gym")]
    (query,) = supabase.queries_on("playlists")
    assert ("user_id", USER_ID) in query.args_of("eq")


@pytest.mark.asyncio
async def test_create_playlist_returns_201(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    created = make_playlist(name="Focus")
    supabase.script("playlists", [created])

    resp = await user_client.post("/api/playlists", json={"name": "  Focus "})

    assert resp.status_code == 201
    assert resp.json()["playlist"] == created
    (query,) = supabase.queries_on("playlists")
    assert query.args_of("insert") == [({"name": "Focus", "user_id": USER_ID},)]


@pytest.mark.asyncio
async def test_create_playlist_validation(user_client: AsyncClient, supabase: FakeSupabase) -> None:
    resp = await user_client.post("/api/playlists", json={"name": ""})

    assert resp.status_code == 400
    assert resp.json()["error"] == "name: Playlist name is required"
    assert supabase.call_count == 0


@pytest.mark.asyncio
async def test_create_playlist_database_error(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    supabase.script("playlists", query_error())

    resp = await user_client.post("/api/playlists", json={"name": "Focus"})

    assert resp.status_code == 500
    assert resp.json()["code"] == "DATABASE_ERROR"


# ---------------------------------------------------------------------------
# 3. Single playlist
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_get_playlist_includes_ordered_tracks(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    first, second = make_track(), make_track(id=OTHER_TRACK_ID, title="Experience")
    supabase.script("playlists", make_playlist())
    supabase.script(
        "playlist_tracks",
        [make_entry(track=first, position=1), make_entry(track=second, position=2)],
    )

    resp = await user_client.get(f"/api/playlists/{PLAYLIST_ID}")

    assert resp.status_code == 200
    playlist = resp.json()["playlist"]
    assert playlist["name"] == "Gym"
    assert [track["id"] for track in playlist["tracks"]] == [TRACK_ID, OTHER_TRACK_ID]
    (entries,) = supabase.queries_on("playlist_tracks")
    assert entries.args_of("order") == [("position",)]


@pytest.mark.asyncio
async def test_get_playlist_not_found(user_client: AsyncClient, supabase: FakeSupabase) -> None:
    supabase.script("playlists", no_rows_error())

    resp = await user_client.get(f"/api/playlists/{PLAYLIST_ID}")

    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"
    assert resp.json()["error"] == "Playlist not found"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, path",
    [
        ("GET", "/api/playlists/missing"),
        ("DELETE", "/api/playlists/missing"),
        ("DELETE", f"/api/playlists/{PLAYLIST_ID}/tracks?trackId=nope"),
    ],
)
async def test_malformed_ids_never_reach_backend(
    user_client: AsyncClient, supabase: FakeSupabase, method: str, path: str
) -> None:
    resp = await user_client.request(method, path)

    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_ID"
    assert supabase.call_count == 0


@pytest.mark.asyncio
async def test_rename_playlist(user_client: AsyncClient, supabase: FakeSupabase) -> None:
    supabase.script("playlists", [make_playlist(name="Deep Work")])

    resp = await user_client.put(f"/api/playlists/{PLAYLIST_ID}", json={"name": "Deep Work"})

    assert resp.status_code == 200
    assert resp.json()["playlist"]["name"] == "Deep Work"
    (query,) = supabase.queries_on("playlists")
    (changes,) = query.args_of("update")
    assert changes[0]["name"] == "Deep Work"
    assert "updated_at" in changes[0]


@pytest.mark.asyncio
async def test_rename_someone_elses_playlist_is_not_found(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    supabase.script("playlists", [])

    resp = await user_client.put(f"/api/playlists/{PLAYLIST_ID}", json={"name": "Mine now"})

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_playlist(user_client: AsyncClient, supabase: FakeSupabase) -> None:
    supabase.script("playlists", [make_playlist()])

    resp = await user_client.delete(f"/api/playlists/{PLAYLIST_ID}")

    assert resp.status_code == 200
    assert resp.json()["id"] == PLAYLIST_ID


@pytest.mark.asyncio
async def test_delete_missing_playlist(user_client: AsyncClient, supabase: FakeSupabase) -> None:
    supabase.script("playlists", [])

    resp = await user_client.delete(f"/api/playlists/{PLAYLIST_ID}")

    assert resp.status_code == 404
    assert resp.json()["error"] == "Playlist not found"


# ---------------------------------------------------------------------------
# 4. Playlist tracks
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_add_track_appends_after_last_position(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    entry = {"id": "e4", "playlist_id": PLAYLIST_ID, "track_id": TRACK_ID, "position": 4}
    supabase.script("playlists", make_playlist())
    supabase.script("playlist_tracks", [], [{"position": 3}], [entry])

    resp = await user_client.post(
        f"/api/playlists/{PLAYLIST_ID}/tracks", json={"trackId": TRACK_ID}
    )

    assert resp.status_code == 201
    assert resp.json()["playlist_track"] == entry
    insert = supabase.queries_on("playlist_tracks")[-1]
    assert insert.args_of("insert") == [
        ({"playlist_id": PLAYLIST_ID, "track_id": TRACK_ID, "position": 4},)
    ]


@pytest.mark.asyncio
async def test_add_track_to_empty_playlist_starts_at_one(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    supabase.script("playlists", make_playlist())
    supabase.script("playlist_tracks", [], [], [{"id": "e1", "position": 1}])

    resp = await user_client.post(
        f"/api/playlists/{PLAYLIST_ID}/tracks", json={"track_id": TRACK_ID}
    )

    assert resp.status_code == 201
    insert = supabase.queries_on("playlist_tracks")[-1]
    assert insert.args_of("insert")[0][0]["position"] == 1


@pytest.mark.asyncio
async def test_add_duplicate_track_is_conflict(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    supabase.script("playlists", make_playlist())
    supabase.script("playlist_tracks", [{"id": "e1"}])

    resp = await user_client.post(
        f"/api/playlists/{PLAYLIST_ID}/tracks", json={"trackId": TRACK_ID}
    )

    assert resp.status_code == 409
    assert resp.json()["code"] == "TRACK_ALREADY_IN_PLAYLIST"
    assert len(supabase.queries_on("playlist_tracks")) == 1


@pytest.mark.asyncio
async def test_add_unknown_track_is_not_found(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    supabase.script("playlists", make_playlist())
    supabase.script("playlist_tracks", [], [], query_error("violates foreign key", "23503"))

    resp = await user_client.post(
        f"/api/playlists/{PLAYLIST_ID}/tracks", json={"trackId": TRACK_ID}
    )

    assert resp.status_code == 404
    assert resp.json()["error"] == "Track not found"


@pytest.mark.asyncio
async def test_add_track_validates_body(user_client: AsyncClient, supabase: FakeSupabase) -> None:
    resp = await user_client.post(
        f"/api/playlists/{PLAYLIST_ID}/tracks", json={"trackId": "42"}
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "trackId: Must be a valid track ID"
    assert supabase.call_count == 0


@pytest.mark.asyncio
async def test_remove_track(user_client: AsyncClient, supabase: FakeSupabase) -> None:
    supabase.script("playlists", make_playlist())
    supabase.script("playlist_tracks", [make_entry()])

    resp = await user_client.delete(
        f"/api/playlists/{PLAYLIST_ID}/tracks", params={"trackId": TRACK_ID}
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"playlist_id": PLAYLIST_ID, "track_id": TRACK_ID}


@pytest.mark.asyncio
async def test_remove_track_not_in_playlist(
    user_client: AsyncClient, supabase: FakeSupabase
) -> None:
    supabase.script("playlists", make_playlist())
    supabase.script("playlist_tracks", [])

    resp = await user_client.delete(
        f"/api/playlists/{PLAYLIST_ID}/tracks", params={"trackId": TRACK_ID}
    )

    assert resp.status_code == 404
    assert resp.json()["error"] == "Track not found in playlist"
