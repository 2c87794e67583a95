"""Playlist business logic.

All operations act on the authenticated user's own playlists. A playlist
owned by someone else is indistinguishable from a missing one (404).
"""

from typing import Any

from tracklist.backend import Backend, BackendError
from tracklist.failures import (
    ErrorCode,
    Failure,
    FailureKind,
    database_error,
    not_found,
)
from tracklist.repositories import playlists as repo
from tracklist.result import Err, Ok, Result

# Postgres foreign key violation: the referenced track does not exist
FOREIGN_KEY_VIOLATION = "23503"
# Postgres unique violation: a concurrent insert won the race
UNIQUE_VIOLATION = "23505"


def _already_in_playlist(cause: Any = None) -> Failure:
    return Failure(
        FailureKind.REJECTED,
        ErrorCode.TRACK_ALREADY_IN_PLAYLIST,
        "Track already in playlist",
        "This track has already been added to the playlist",
        status=409,
        cause=cause,
    )


async def list_playlists(
    backend: Backend, user_id: str
) -> Result[list[dict[str, Any]], Failure]:
    match await repo.list_playlists(backend, user_id):
        case Ok(rows):
            return Ok(rows or [])
        case Err(error):
            return Err(database_error("Failed to fetch playlists", cause=error))


async def create_playlist(
    backend: Backend, user_id: str, name: str
) -> Result[dict[str, Any], Failure]:
    match await repo.insert_playlist(backend, user_id, name):
        case Ok([playlist, *_]):
            return Ok(playlist)
        case Ok(_):
            return Err(database_error("Failed to create playlist", cause="insert returned no rows"))
        case Err(error):
            return Err(database_error("Failed to create playlist", cause=error))


async def _owned_playlist(
    backend: Backend, playlist_id: str, user_id: str
) -> Result[dict[str, Any], Failure]:
    match await repo.get_playlist(backend, playlist_id, user_id):
        case Ok(playlist):
            return Ok(playlist)
        case Err(error) if error.is_no_rows:
            return Err(not_found("playlist"))
        case Err(error):
            return Err(database_error("Failed to fetch playlist", cause=error))


async def get_playlist(
    backend: Backend, playlist_id: str, user_id: str
) -> Result[dict[str, Any], Failure]:
    """Return the playlist with its tracks in playlist order."""
    match await _owned_playlist(backend, playlist_id, user_id):
        case Err() as failed:
            return failed
        case Ok(playlist):
            pass

    match await repo.list_entries(backend, playlist_id):
        case Ok(entries):
            tracks = [entry["tracks"] for entry in entries or [] if entry.get("tracks")]
            return Ok({**playlist, "tracks": tracks})
        case Err(error):
            return Err(database_error("Failed to fetch playlist tracks", cause=error))


async def rename_playlist(
    backend: Backend, playlist_id: str, user_id: str, name: str
) -> Result[dict[str, Any], Failure]:
    match await repo.update_playlist(backend, playlist_id, user_id, name):
        case Ok([playlist, *_]):
            return Ok(playlist)
        case Ok(_):
            return Err(not_found("playlist"))
        case Err(error):
            return Err(database_error("Failed to update playlist", cause=error))


async def delete_playlist(
    backend: Backend, playlist_id: str, user_id: str
) -> Result[dict[str, Any], Failure]:
    match await repo.delete_playlist(backend, playlist_id, user_id):
        case Ok([_, *_]):
            return Ok({"id": playlist_id})
        case Ok(_):
            return Err(not_found("playlist"))
        case Err(error):
            return Err(database_error("Failed to delete playlist", cause=error))


async def add_track(
    backend: Backend, playlist_id: str, user_id: str, track_id: str
) -> Result[dict[str, Any], Failure]:
    """Append a track to the end of a playlist (position = current max + 1)."""
    match await _owned_playlist(backend, playlist_id, user_id):
        case Err() as failed:
            return failed

    match await repo.find_entry(backend, playlist_id, track_id):
        case Ok([_, *_]):
            return Err(_already_in_playlist())
        case Ok(_):
            pass
        case Err(error):
            return Err(database_error("Failed to add track to playlist", cause=error))

    match await repo.last_position(backend, playlist_id):
        case Ok([{"position": int(last)}, *_]):
            position = last + 1
        case Ok(_):
            position = 1
        case Err(error):
            return Err(database_error("Failed to add track to playlist", cause=error))

    match await repo.insert_entry(backend, playlist_id, track_id, position):
        case Ok([entry, *_]):
            return Ok(entry)
        case Ok(_):
            return Err(
                database_error("Failed to add track to playlist", cause="insert returned no rows")
            )
        case Err(error):
            return Err(_insert_failure(error))


def _insert_failure(error: BackendError) -> Failure:
    if error.code == UNIQUE_VIOLATION:
        return _already_in_playlist(cause=error)
    if error.code == FOREIGN_KEY_VIOLATION:
        return Failure(
            FailureKind.NOT_FOUND,
            ErrorCode.NOT_FOUND,
            "Track not found",
            "The requested track does not exist",
            cause=error,
        )
    return database_error("Failed to add track to playlist", cause=error)


async def remove_track(
    backend: Backend, playlist_id: str, user_id: str, track_id: str
) -> Result[dict[str, Any], Failure]:
    match await _owned_playlist(backend, playlist_id, user_id):
        case Err() as failed:
            return failed

    match await repo.delete_entry(backend, playlist_id, track_id):
        case Ok([_, *_]):
            return Ok({"playlist_id": playlist_id, "track_id": track_id})
        case Ok(_):
            return Err(
                Failure(
                    FailureKind.NOT_FOUND,
                    ErrorCode.NOT_FOUND,
                    "Track not found in playlist",
                    "The requested track is not in this playlist",
                )
            )
        case Err(error):
            return Err(database_error("Failed to remove track from playlist", cause=error))
