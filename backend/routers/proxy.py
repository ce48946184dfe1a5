"""Proxy router — relays Plex API and image requests for the logged-in browser.

The token and server addresses live in httpOnly cookies and are attached
server-side, so they never reach the client. The client only sees paths like
/proxy/api/library/sections or /proxy/image/library/metadata/1/thumb/2.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from config import Settings
from errors import ProxyError, UpstreamError
from models import SessionStatus
from services.forwarder import ProxyForwarder
from session_store import CookieSessionStore, clear_session, get_client_id, load_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["proxy"])


def _error_response(err: ProxyError, store: CookieSessionStore, settings: Settings) -> Response:
    response = JSONResponse({"detail": err.message}, status_code=err.status_code)
    if (
        settings.invalidate_on_auth_rejection
        and isinstance(err, UpstreamError)
        and err.is_auth_rejection
    ):
        logger.warning("Plex rejected the stored token (%d); clearing session", err.status_code)
        clear_session(store)
        store.apply(response)
    return response


@router.get("/proxy/api/{path:path}")
async def proxy_api(path: str, request: Request):
    """Forward a read-only Plex API call and relay its JSON."""
    logger.info("API Proxy: Received request for path: /%s?%s", path, request.url.query)
    forwarder: ProxyForwarder = request.app.state.forwarder
    store = CookieSessionStore(request)

    try:
        result = await forwarder.forward_api(
            load_session(store), path, request.url.query, client_id=get_client_id(store),
        )
    except ProxyError as e:
        return _error_response(e, store, forwarder.settings)

    return JSONResponse(result.data, headers={"Cache-Control": result.cache_control})


@router.get("/proxy/image/{path:path}")
async def proxy_image(path: str, request: Request):
    """Forward a Plex image request and relay its bytes unchanged."""
    logger.info("Image Proxy: Received request for path: /%s?%s", path, request.url.query)
    forwarder: ProxyForwarder = request.app.state.forwarder
    store = CookieSessionStore(request)

    try:
        result = await forwarder.forward_image(
            load_session(store), path, request.url.query, client_id=get_client_id(store),
        )
    except ProxyError as e:
        return _error_response(e, store, forwarder.settings)

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Cache-Control": result.cache_control},
    )


@router.get("/api/session", response_model=SessionStatus)
async def session_status(request: Request):
    """Whether the browser holds a complete session; never exposes the token."""
    session = load_session(CookieSessionStore(request))
    if session is None:
        return SessionStatus(authenticated=False)
    return SessionStatus(authenticated=True, server_url=session.remote_address)
