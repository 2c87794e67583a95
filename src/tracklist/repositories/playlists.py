"""Playlist data-access layer.

Every query on ``playlists`` is scoped by ``user_id`` so callers can only
see and change their own rows. ``playlist_tracks`` queries assume the caller
already checked ownership of the playlist.
"""

from datetime import UTC, datetime
from typing import Any

from tracklist.backend import Backend, BackendError
from tracklist.result import Result

PLAYLISTS = "playlists"
PLAYLIST_TRACKS = "playlist_tracks"

Rows = list[dict[str, Any]]


async def list_playlists(backend: Backend, user_id: str) -> Result[Rows, BackendError]:
    """Return the user's playlists, most recent first."""
    query = (
        backend.table(PLAYLISTS)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
    )
    return await backend.query(query, "SELECT playlists for user", user_id=user_id)


async def get_playlist(
    backend: Backend, playlist_id: str, user_id: str
) -> Result[dict[str, Any], BackendError]:
    query = (
        backend.table(PLAYLISTS)
        .select("*")
        .eq("id", playlist_id)
        .eq("user_id", user_id)
        .single()
    )
    return await backend.query(query, "SELECT playlist by ID", playlist_id=playlist_id)


async def insert_playlist(backend: Backend, user_id: str, name: str) -> Result[Rows, BackendError]:
    query = backend.table(PLAYLISTS).insert({"name": name, "user_id": user_id})
    return await backend.query(query, "INSERT playlist", user_id=user_id)


async def update_playlist(
    backend: Backend, playlist_id: str, user_id: str, name: str
) -> Result[Rows, BackendError]:
    """Rename a playlist. An empty result means no owned playlist matched."""
    query = (
        backend.table(PLAYLISTS)
        .update({"name": name, "updated_at": datetime.now(UTC).isoformat()})
        .eq("id", playlist_id)
        .eq("user_id", user_id)
    )
    return await backend.query(query, "UPDATE playlist", playlist_id=playlist_id)


async def delete_playlist(
    backend: Backend, playlist_id: str, user_id: str
) -> Result[Rows, BackendError]:
    """Delete a playlist. An empty result means no owned playlist matched."""
    query = backend.table(PLAYLISTS).delete().eq("id", playlist_id).eq("user_id", user_id)
    return await backend.query(query, "DELETE playlist", playlist_id=playlist_id)


async def search_playlists(
    backend: Backend, *, q: str, user_id: str, limit: int, offset: int
) -> Result[tuple[Rows, int], BackendError]:
    """Return the user's playlists whose name matches ``q``, plus the match count."""
    query = (
        backend.table(PLAYLISTS)
        .select("*", count="exact")
        .eq("user_id", user_id)
        .ilike("name", f"%{q}%")
        .range(offset, offset + limit - 1)
        .order("created_at", desc=True)
    )
    return await backend.query_with_count(query, "SEARCH playlists", q=q, user_id=user_id)


# ---------------------------------------------------------------------------
# Playlist tracks
# ---------------------------------------------------------------------------


async def list_entries(backend: Backend, playlist_id: str) -> Result[Rows, BackendError]:
    """Return playlist entries with their track embedded, in playlist order."""
    query = (
        backend.table(PLAYLIST_TRACKS)
        .select("*, tracks(*)")
        .eq("playlist_id", playlist_id)
        .order("position")
    )
    return await backend.query(query, "SELECT playlist tracks", playlist_id=playlist_id)


async def find_entry(
    backend: Backend, playlist_id: str, track_id: str
) -> Result[Rows, BackendError]:
    query = (
        backend.table(PLAYLIST_TRACKS)
        .select("id")
        .eq("playlist_id", playlist_id)
        .eq("track_id", track_id)
    )
    return await backend.query(query, "SELECT playlist track", playlist_id=playlist_id)


async def last_position(backend: Backend, playlist_id: str) -> Result[Rows, BackendError]:
    """Return at most one row holding the highest position in the playlist."""
    query = (
        backend.table(PLAYLIST_TRACKS)
        .select("position")
        .eq("playlist_id", playlist_id)
        .order("position", desc=True)
        .limit(1)
    )
    return await backend.query(query, "SELECT last playlist position", playlist_id=playlist_id)


async def insert_entry(
    backend: Backend, playlist_id: str, track_id: str, position: int
) -> Result[Rows, BackendError]:
    query = backend.table(PLAYLIST_TRACKS).insert(
        {"playlist_id": playlist_id, "track_id": track_id, "position": position}
    )
    return await backend.query(query, "INSERT playlist track", playlist_id=playlist_id)


async def delete_entry(
    backend: Backend, playlist_id: str, track_id: str
) -> Result[Rows, BackendError]:
    query = (
        backend.table(PLAYLIST_TRACKS)
        .delete()
        .eq("playlist_id", playlist_id)
        .eq("track_id", track_id)
    )
    return await backend.query(query, "DELETE playlist track", playlist_id=playlist_id)
