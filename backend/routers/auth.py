"""Auth router — Plex PIN login, callback handshake and logout."""

import logging
import uuid

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse

from config import Settings
from errors import AuthError
from models import PairingRequest
from services.handshake import complete_handshake
from services.plex_tv import PlexTvClient
from session_store import (
    CLIENT_ID_KEY,
    CookieSessionStore,
    clear_session,
    consume_pairing,
    get_client_id,
    load_pairing,
    save_pairing,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/auth/login")
async def login(request: Request):
    """Create a PIN and send the browser to Plex to approve it."""
    settings: Settings = request.app.state.settings
    plex_tv: PlexTvClient = request.app.state.plex_tv
    store = CookieSessionStore(request)

    client_id = get_client_id(store) or str(uuid.uuid4())
    try:
        pin = await plex_tv.create_pin(client_id)
    except AuthError as e:
        raise HTTPException(502, f"Could not start Plex login: {e.message}")

    save_pairing(
        store,
        PairingRequest(pairing_id=str(pin.id), client_id=client_id),
        ttl=settings.pairing_max_age,
        client_ttl=settings.session_max_age,
    )
    forward_url = str(request.url_for("auth_callback"))
    logger.info("Login: created PIN %s for client %s", pin.id, client_id)

    response = RedirectResponse(plex_tv.auth_url(client_id, pin.code, forward_url), status_code=303)
    return store.apply(response)


@router.get("/auth/callback", name="auth_callback")
async def auth_callback(request: Request):
    """Runs after Plex redirects back: finish the handshake, store the session."""
    settings: Settings = request.app.state.settings
    plex_tv: PlexTvClient = request.app.state.plex_tv
    store = CookieSessionStore(request)

    pairing = load_pairing(store)
    if pairing is None:
        logger.error("Callback: Missing pinId or clientId cookie")
        consume_pairing(store)
        store.delete(CLIENT_ID_KEY)
        response = JSONResponse(
            {"detail": "Missing authentication data. Please try logging in again."},
            status_code=400,
        )
        return store.apply(response)

    try:
        await complete_handshake(plex_tv, store, pairing, settings)
    except AuthError as e:
        response = JSONResponse(
            {"detail": f"Authentication failed: {e.message}"},
            status_code=e.status_code,
        )
        return store.apply(response)

    logger.info("Callback: Redirecting to %s", settings.home_path)
    return store.apply(RedirectResponse(settings.home_path, status_code=303))


@router.post("/logout")
async def logout(request: Request):
    """Clear the session cookies; the client id is kept for the next login."""
    settings: Settings = request.app.state.settings
    store = CookieSessionStore(request)
    clear_session(store)
    logger.info("Logout: Cleared auth cookies.")
    return store.apply(RedirectResponse(settings.login_path, status_code=303))
