"""Track catalogue and search endpoints (public; a session only widens search)."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tracklist.backend import Backend
from tracklist.dependencies import SessionToken, Supabase
from tracklist.failures import invalid_id
from tracklist.logging import get_logger
from tracklist.pipeline import Reply, RouteCall, parse_query, run_route
from tracklist.result import Err, Ok
from tracklist.schemas.requests import SearchQuery, TracksQuery
from tracklist.services import auth, tracks
from tracklist.validation import is_uuid

router = APIRouter(prefix="/api")


@router.get("/tracks")
async def list_tracks(request: Request, supabase: Supabase) -> JSONResponse:
    """List tracks newest first, optionally filtered by genre and a title/artist search."""
    logger = get_logger("api:tracks")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match parse_query(call, TracksQuery, request.query_params):
            case Err(reply):
                return reply
            case Ok(query):
                pass
        call.request_received(genre=query.genre, search=query.search)
        outcome = await tracks.list_tracks(backend, query)
        return call.settle(outcome, lambda rows: Reply.ok({"tracks": rows}))

    return await run_route(request, logger, pipeline)


@router.get("/tracks/{track_id}")
async def get_track(request: Request, track_id: str, supabase: Supabase) -> JSONResponse:
    """Fetch one track. The id must be UUID-shaped; it is checked before any query."""
    logger = get_logger("api:tracks:[id]")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        if not is_uuid(track_id):
            return call.reject(invalid_id("track"), id=track_id)
        call.request_received()
        outcome = await tracks.get_track(backend, track_id)
        return call.settle(outcome, lambda track: Reply.ok({"track": track}), id=track_id)

    return await run_route(request, logger, pipeline)


@router.get("/search")
async def search(request: Request, supabase: Supabase, token: SessionToken) -> JSONResponse:
    """Search tracks and/or playlists with shared limit/offset pagination.

    The session is optional. Playlist hits are limited to the caller's own
    playlists, so an anonymous search only ever finds tracks.
    """
    logger = get_logger("api:search")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match parse_query(call, SearchQuery, request.query_params):
            case Err(reply):
                return reply
            case Ok(query):
                pass
        call.request_received(
            q=query.q,
            search_type=query.type,
            genre=query.genre,
            limit=query.limit,
            offset=query.offset,
        )
        owner_id = None
        if token is not None:
            match await auth.authenticate(backend, token):
                case Err(failure):
                    return call.reject(failure)
                case Ok(user):
                    owner_id = user.id
        outcome = await tracks.search(backend, query, owner_id)
        return call.settle(outcome, lambda results: Reply.ok(results.to_data()), q=query.q)

    return await run_route(request, logger, pipeline)
