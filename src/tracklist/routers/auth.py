"""Auth endpoints: register, login, logout."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tracklist.backend import Backend
from tracklist.dependencies import AppSettings, AuthSupabase, SessionToken, Supabase
from tracklist.logging import get_logger
from tracklist.pipeline import CookieChange, Reply, RouteCall, parse_body, run_route
from tracklist.result import Err, Ok
from tracklist.schemas.requests import LoginRequest, RegisterRequest
from tracklist.services import auth

router = APIRouter(prefix="/api/auth")


@router.post("/register")
async def register(request: Request, auth_client: AuthSupabase) -> JSONResponse:
    """Create an account. Returns the new user (unconfirmed until email verification)."""
    logger = get_logger("api:auth:register")
    backend = Backend(auth_client, logger)

    async def pipeline(call: RouteCall) -> Reply:
        match await parse_body(call, RegisterRequest):
            case Err(reply):
                return reply
            case Ok(payload):
                pass
        call.request_received()
        outcome = await auth.register(backend, payload)
        return call.settle(outcome, lambda user: Reply.ok({"user": user}))

    return await run_route(request, logger, pipeline)


@router.post("/login")
async def login(
    request: Request, auth_client: AuthSupabase, settings: AppSettings
) -> JSONResponse:
    """Sign in with email and password and set the session cookie."""
    logger = get_logger("api:auth:login")
    backend = Backend(auth_client, logger)

    def signed_in(result: auth.SignedIn) -> Reply:
        cookie = CookieChange(
            settings.session_cookie_name,
            result.access_token,
            max_age=settings.session_cookie_max_age,
            secure=settings.session_cookie_secure,
        )
        return Reply.ok({"user": result.user, "session": result.session}).with_cookie(cookie)

    async def pipeline(call: RouteCall) -> Reply:
        match await parse_body(call, LoginRequest):
            case Err(reply):
                return reply
            case Ok(payload):
                pass
        call.request_received()
        return call.settle(await auth.login(backend, payload), signed_in)

    return await run_route(request, logger, pipeline)


@router.post("/logout")
async def logout(
    request: Request, supabase: Supabase, token: SessionToken, settings: AppSettings
) -> JSONResponse:
    """Revoke the current session (if any) and clear the session cookie."""
    logger = get_logger("api:auth:logout")
    backend = Backend(supabase, logger)

    async def pipeline(call: RouteCall) -> Reply:
        call.request_received()
        if not await auth.logout(backend, token):
            logger.info("No active session to revoke")
        cookie = CookieChange(
            settings.session_cookie_name, None, secure=settings.session_cookie_secure
        )
        return Reply.ok({"signed_out": True}).with_cookie(cookie)

    return await run_route(request, logger, pipeline)
