"""Track submission endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tracklist.backend import Backend
from tracklist.dependencies import SessionToken, Supabase
from tracklist.failures import invalid_id
from tracklist.logging import get_logger
from tracklist.pipeline import Reply, RouteCall, parse_body, parse_query, run_route
from tracklist.result import Err, Ok
from tracklist.schemas.requests import (
    CreateSubmissionRequest,
    SubmissionsQuery,
    UpdateSubmissionRequest,
)
from tracklist.services import auth, submissions
from tracklist.validation import is_uuid

router = APIRouter(prefix="/api/submissions")


@router.post("")
async def create_submission(
    request: Request, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """Submit a track for admin review."""
    logger = get_logger("api:submissions")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match await parse_body(call, CreateSubmissionRequest):
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
        outcome = await submissions.create_submission(backend, user.id, payload)
        return call.settle(
            outcome, lambda submission: Reply.ok({"submission": submission}, status=201)
        )

    return await run_route(request, logger, pipeline)


@router.get("")
async def list_submissions(
    request: Request, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """List the caller's submissions, or every submission with ``?admin=true`` (admins only)."""
    logger = get_logger("api:submissions")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match parse_query(call, SubmissionsQuery, request.query_params):
            case Err(reply):
                return reply
            case Ok(query):
                pass
        call.request_received(status=query.status, admin=query.admin)
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        if query.admin:
            match await auth.require_admin(backend, user):
                case Err(failure):
                    return call.reject(failure, user_id=user.id)
        outcome = await submissions.list_submissions(
            backend,
            submitted_by=None if query.admin else user.id,
            status=query.status,
        )
        return call.settle(outcome, lambda rows: Reply.ok({"submissions": rows}))

    return await run_route(request, logger, pipeline)


@router.put("/{submission_id}")
async def review_submission(
    request: Request, submission_id: str, supabase: Supabase, token: SessionToken
) -> JSONResponse:
    """Approve or reject a pending submission (admins only)."""
    logger = get_logger("api:submissions:[id]")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match await parse_body(call, UpdateSubmissionRequest):
            case Err(reply):
                return reply
            case Ok(payload):
                pass
        if not is_uuid(submission_id):
            return call.reject(invalid_id("submission"), id=submission_id)
        call.request_received(status=payload.status)
        match await auth.authenticate(backend, token):
            case Err(failure):
                return call.reject(failure)
            case Ok(user):
                pass
        match await auth.require_admin(backend, user):
            case Err(failure):
                return call.reject(failure, user_id=user.id)
        outcome = await submissions.review_submission(backend, submission_id, payload)
        if isinstance(outcome, Ok) and payload.status == "approved":
            logger.info("Published track from approved submission", id=submission_id)
        return call.settle(
            outcome,
            lambda submission: Reply.ok({"submission": submission}),
            id=submission_id,
        )

    return await run_route(request, logger, pipeline)
