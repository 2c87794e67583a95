"""Track business logic: listing, lookup and cross-table search."""

from dataclasses import dataclass
from typing import Any

from tracklist.backend import Backend
from tracklist.failures import Failure, database_error, not_found
from tracklist.repositories import playlists as playlist_repo
from tracklist.repositories import tracks as track_repo
from tracklist.result import Err, Ok, Result
from tracklist.schemas.requests import SearchQuery, TracksQuery

ALL_GENRES = "All"


def _genre_filter(genre: str | None) -> str | None:
    """``"All"`` and empty values mean no genre filter."""
    if not genre or genre == ALL_GENRES:
        return None
    return genre


async def list_tracks(
    backend: Backend, query: TracksQuery
) -> Result[list[dict[str, Any]], Failure]:
    outcome = await track_repo.list_tracks(
        backend,
        genre=_genre_filter(query.genre),
        search=query.search or None,
        limit=query.limit,
        offset=query.offset,
    )
    match outcome:
        case Ok(rows):
            return Ok(rows or [])
        case Err(error):
            return Err(database_error("Failed to fetch tracks", cause=error))


async def get_track(backend: Backend, track_id: str) -> Result[dict[str, Any], Failure]:
    match await track_repo.get_track(backend, track_id):
        case Ok(track):
            return Ok(track)
        case Err(error) if error.is_no_rows:
            return Err(not_found("track"))
        case Err(error):
            return Err(database_error("Failed to fetch track", cause=error))


@dataclass
class SearchResults:
    """One page of search hits plus pagination metadata across both tables."""

    limit: int
    offset: int
    tracks: list[dict[str, Any]] | None = None
    playlists: list[dict[str, Any]] | None = None
    total: int = 0

    @property
    def has_more(self) -> bool:
        return self.total > self.offset + self.limit

    def to_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.tracks is not None:
            data["tracks"] = self.tracks
        if self.playlists is not None:
            data["playlists"] = self.playlists
        data["pagination"] = {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.has_more,
        }
        return data


async def search(
    backend: Backend, query: SearchQuery, owner_id: str | None = None
) -> Result[SearchResults, Failure]:
    """Search tracks (title/artist) and/or playlists (name) for ``query.q``.

    Playlists are private: only ``owner_id``'s playlists are searched, and an
    anonymous search gets an empty playlist list without querying. The
    ``pagination.total`` sums the match counts of every searched table.
    """
    results = SearchResults(limit=query.limit, offset=query.offset)

    if query.type in ("tracks", "all"):
        outcome = await track_repo.search_tracks(
            backend,
            q=query.q,
            genre=_genre_filter(query.genre),
            limit=query.limit,
            offset=query.offset,
        )
        match outcome:
            case Ok((rows, count)):
                results.tracks = rows or []
                results.total += count
            case Err(error):
                return Err(database_error("Search failed", cause=error))

    if query.type in ("playlists", "all"):
        if owner_id is None:
            results.playlists = []
            return Ok(results)
        outcome = await playlist_repo.search_playlists(
            backend, q=query.q, user_id=owner_id, limit=query.limit, offset=query.offset
        )
        match outcome:
            case Ok((rows, count)):
                results.playlists = rows or []
                results.total += count
            case Err(error):
                return Err(database_error("Search failed", cause=error))

    return Ok(results)
