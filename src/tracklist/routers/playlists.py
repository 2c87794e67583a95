"""Playlist endpoints. Every route requires a session and acts on the caller's playlists."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tracklist.backend import Backend
from tracklist.dependencies import SessionToken, Supabase
from tracklist.failures import invalid_id
from tracklist.logging import get_logger
from tracklist.pipeline import Reply, RouteCall, parse_body, run_route
from tracklist.result import Err, Ok
from tracklist.schemas.requests import (
    AddTrackRequest,
    CreatePlaylistRequest,
    UpdatePlaylistRequest,
)
from tracklist.services import auth, playlists
from tracklist.validation import is_uuid

router = APIRouter(prefix="/api/playlists")


@router.get("")
async def list_playlists(request: Request, supabase: Supabase, token: SessionToken) -> JSONResponse:
    """List the caller's playlists, most recent first."""
    logger = get_logger("api:playlists")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        call.request_received()
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        outcome = await playlists.list_playlists(backend, user.id)
        return call.settle(outcome, lambda rows: Reply.ok({"playlists": rows}))

    return await run_route(request, logger, pipeline)


@router.post("")
async def create_playlist(
    request: Request, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """Create an empty playlist owned by the caller."""
    logger = get_logger("api:playlists")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match await parse_body(call, CreatePlaylistRequest):
            case Err(reply):
                return reply
            case Ok(payload):
                pass
        call.request_received()
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        outcome = await playlists.create_playlist(backend, user.id, payload.name)
        return call.settle(outcome, lambda playlist: Reply.ok({"playlist": playlist}, status=201))

    return await run_route(request, logger, pipeline)


@router.get("/{playlist_id}")
async def get_playlist(
    request: Request, playlist_id: str, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """Fetch one playlist with its tracks in playlist order."""
    logger = get_logger("api:playlists:[id]")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        if not is_uuid(playlist_id):
            return call.reject(invalid_id("playlist"), id=playlist_id)
        call.request_received()
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        outcome = await playlists.get_playlist(backend, playlist_id, user.id)
        return call.settle(
            outcome, lambda playlist: Reply.ok({"playlist": playlist}), id=playlist_id
        )

    return await run_route(request, logger, pipeline)


@router.put("/{playlist_id}")
async def rename_playlist(
    request: Request, playlist_id: str, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """Rename a playlist."""
    logger = get_logger("api:playlists:[id]")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match await parse_body(call, UpdatePlaylistRequest):
            case Err(reply):
                return reply
            case Ok(payload):
                pass
        if not is_uuid(playlist_id):
            return call.reject(invalid_id("playlist"), id=playlist_id)
        call.request_received()
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        outcome = await playlists.rename_playlist(backend, playlist_id, user.id, payload.name)
        return call.settle(
            outcome, lambda playlist: Reply.ok({"playlist": playlist}), id=playlist_id
        )

    return await run_route(request, logger, pipeline)


@router.delete("/{playlist_id}")
async def delete_playlist(
    request: Request, playlist_id: str, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """Delete a playlist and, through the foreign key cascade, its entries."""
    logger = get_logger("api:playlists:[id]")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        if not is_uuid(playlist_id):
            return call.reject(invalid_id("playlist"), id=playlist_id)
        call.request_received()
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        outcome = await playlists.delete_playlist(backend, playlist_id, user.id)
        return call.settle(outcome, Reply.ok, id=playlist_id)

    return await run_route(request, logger, pipeline)


@router.post("/{playlist_id}/tracks")
async def add_track(
    request: Request, playlist_id: str, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """Append a track to the end of a playlist."""
    logger = get_logger("api:playlists:[id]:tracks")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match await parse_body(call, AddTrackRequest):
            case Err(reply):
                return reply
            case Ok(payload):
                pass
        if not is_uuid(playlist_id):
            return call.reject(invalid_id("playlist"), id=playlist_id)
        call.request_received(track_id=payload.track_id)
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        outcome = await playlists.add_track(backend, playlist_id, user.id, payload.track_id)
        return call.settle(
            outcome,
            lambda entry: Reply.ok({"playlist_track": entry}, status=201),
            id=playlist_id,
            track_id=payload.track_id,
        )

    return await run_route(request, logger, pipeline)


@router.delete("/{playlist_id}/tracks")
async def remove_track(
    request: Request, playlist_id: str, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """Remove a track (``?trackId=``) from a playlist."""
    logger = get_logger("api:playlists:[id]:tracks")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        track_id = request.query_params.get("trackId", "")
        if not is_uuid(playlist_id):
            return call.reject(invalid_id("playlist"), id=playlist_id)
        if not is_uuid(track_id):
            return call.reject(invalid_id("track"), id=playlist_id, track_id=track_id)
        call.request_received(track_id=track_id)
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        outcome = await playlists.remove_track(backend, playlist_id, user.id, track_id)
        return call.settle(outcome, Reply.ok, id=playlist_id, track_id=track_id)

    return await run_route(request, logger, pipeline)
