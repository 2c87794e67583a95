"""Track data-access layer.

Pure query functions: no business logic, no HTTP concerns.
Each function takes a Backend and returns the collaborator's outcome.
"""

from typing import Any

from tracklist.backend import Backend, BackendError
from tracklist.result import Result

TABLE = "tracks"


def _title_or_artist(term: str) -> str:
    return f"title.ilike.%{term}%,artist.ilike.%{term}%"


async def list_tracks(
    backend: Backend,
    *,
    genre: str | None,
    search: str | None,
    limit: int | None,
    offset: int,
) -> Result[list[dict[str, Any]], BackendError]:
    """Return tracks newest first: every match, or one page when ``limit`` is set.

    ``offset`` only applies together with ``limit``.
    """
    query = backend.table(TABLE).select("*")
    if genre:
        query = query.eq("genre", genre)
    if search:
        query = query.or_(_title_or_artist(search))
    query = query.order("created_at", desc=True)
    if limit is not None:
        query = query.range(offset, offset + limit - 1)
    return await backend.query(
        query, "SELECT tracks", genre=genre, search=search, limit=limit, offset=offset
    )


async def get_track(backend: Backend, track_id: str) -> Result[dict[str, Any], BackendError]:
    """Return one track. A missing row comes back as a no-rows error."""
    query = backend.table(TABLE).select("*").eq("id", track_id).single()
    return await backend.query(query, "SELECT track by ID", track_id=track_id)


async def search_tracks(
    backend: Backend, *, q: str, genre: str | None, limit: int, offset: int
) -> Result[tuple[list[dict[str, Any]], int], BackendError]:
    """Return matching tracks for one page plus the total match count."""
    query = backend.table(TABLE).select("*", count="exact").or_(_title_or_artist(q))
    if genre:
        query = query.eq("genre", genre)
    query = query.range(offset, offset + limit - 1).order("created_at", desc=True)
    return await backend.query_with_count(query, "SEARCH tracks", q=q, genre=genre)


async def insert_track(
    backend: Backend, row: dict[str, Any]
) -> Result[list[dict[str, Any]], BackendError]:
    """Insert a track and return the inserted rows."""
    query = backend.table(TABLE).insert(row)
    return await backend.query(query, "INSERT track", title=row.get("title"))


async def delete_track(
    backend: Backend, track_id: str
) -> Result[list[dict[str, Any]], BackendError]:
    query = backend.table(TABLE).delete().eq("id", track_id)
    return await backend.query(query, "DELETE track", track_id=track_id)
