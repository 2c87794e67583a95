"""Playlist hook: the caller's playlists plus create/link/delete helpers."""

from typing import Any

from tracklist.client.state import (
    Hook,
    MutationResult,
    PlaylistResult,
    PlaylistTrackResult,
    request_json,
)
from tracklist.result import Err, Ok


class PlaylistsHook(Hook[dict[str, Any]]):
    """The caller's playlists, most recent first.

    Usage::

        async with httpx.AsyncClient(base_url="https://tracklist.example") as http:
            hook = PlaylistsHook(http)
            await hook.mount()
            result = await hook.create_playlist("Focus")
    """

    @property
    def playlists(self) -> list[dict[str, Any]]:
        return self.state.items

    async def mount(self) -> None:
        await self._load("/api/playlists", "playlists", "Failed to fetch playlists")

    async def create_playlist(self, name: str) -> PlaylistResult:
        outcome = await request_json(
            self.http,
            "POST",
            "/api/playlists",
            default_error="Failed to create playlist",
            json={"name": name},
        )
        match outcome:
            case Ok(body):
                playlist = body.get("playlist")
                self._prepend(playlist)
                return PlaylistResult(success=True, playlist=playlist)
            case Err(message):
                return PlaylistResult(success=False, error=message)

    async def add_track_to_playlist(self, playlist_id: str, track_id: str) -> PlaylistTrackResult:
        outcome = await request_json(
            self.http,
            "POST",
            f"/api/playlists/{playlist_id}/tracks",
            default_error="Failed to add track to playlist",
            json={"trackId": track_id},
        )
        match outcome:
            case Ok(body):
                return PlaylistTrackResult(success=True, playlist_track=body.get("playlist_track"))
            case Err(message):
                return PlaylistTrackResult(success=False, error=message)

    async def delete_playlist(self, playlist_id: str) -> MutationResult:
        outcome = await request_json(
            self.http,
            "DELETE",
            f"/api/playlists/{playlist_id}",
            default_error="Failed to delete playlist",
        )
        match outcome:
            case Ok(_):
                self._remove(playlist_id)
                return MutationResult(success=True)
            case Err(message):
                return MutationResult(success=False, error=message)
