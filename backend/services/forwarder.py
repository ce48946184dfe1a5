"""Forwards read-only API and image requests to the paired Plex server."""

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from config import Settings
from errors import Unauthenticated, Unreachable, UpstreamError
from models import DeploymentMode, ProxiedResponse, Session
from services import cache_policy

logger = logging.getLogger(__name__)


class ProxyForwarder:
    """Builds upstream URLs, attaches Plex identity headers, relays replies.

    The address (local or remote) is fixed by the deployment mode; there is
    no per-request probing or failover between the two.
    """

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        self.http = http
        self.settings = settings
        self.mode: DeploymentMode = settings.deployment_mode

    def target_url(self, session: Session, path: str, query: str = "") -> str:
        base = session.address_for(self.mode).rstrip("/")
        url = f"{base}{quote(_normalize(path), safe='/:')}"
        if query:
            url = f"{url}?{query}"
        return url

    async def _fetch(
        self, session: Optional[Session], path: str, query: str,
        headers: dict[str, str], label: str,
    ) -> httpx.Response:
        if session is None:
            logger.error("%s: Missing plexToken or server URL cookies", label)
            raise Unauthenticated("Authentication required. Please login again.")

        url = self.target_url(session, path, query)
        logger.info("%s: Forwarding request to: %s", label, url)
        try:
            resp = await self.http.get(url, headers={**headers, "X-Plex-Token": session.token})
        except httpx.HTTPError as e:
            logger.error("%s: Failed to fetch from Plex (%s): %s", label, url, e)
            raise Unreachable(f"Failed to contact Plex server: {e}")

        if not resp.is_success:
            logger.error(
                "%s: Error from Plex server (%s). Status: %d, Body: %s",
                label, url, resp.status_code, resp.text[:500],
            )
            raise UpstreamError(
                resp.status_code,
                f"Plex {label} Error: {resp.reason_phrase} (Path: {path})",
            )
        return resp

    async def forward_api(
        self, session: Optional[Session], path: str, query: str = "",
        client_id: Optional[str] = None,
    ) -> ProxiedResponse:
        path = _normalize(path)
        headers = {
            "Accept": "application/json",
            **self.settings.product_headers,
            "X-Plex-Client-Identifier": client_id or self.settings.default_client_id,
        }
        resp = await self._fetch(session, path, query, headers, "API")
        try:
            data = resp.json()
        except ValueError:
            logger.error("API: Non-JSON body from Plex for %s", path)
            raise UpstreamError(502, f"Plex API Error: invalid JSON (Path: {path})")

        return ProxiedResponse(
            data=data,
            media_type="application/json",
            cache_seconds=cache_policy.classify(path),
        )

    async def forward_image(
        self, session: Optional[Session], path: str, query: str = "",
        client_id: Optional[str] = None,
    ) -> ProxiedResponse:
        path = _normalize(path)
        headers = {"X-Plex-Client-Identifier": client_id or self.settings.default_client_id}
        resp = await self._fetch(session, path, query, headers, "Image")
        return ProxiedResponse(
            content=resp.content,
            media_type=resp.headers.get("content-type", "image/jpeg"),
            cache_seconds=cache_policy.classify_image(path),
        )


def _normalize(path: str) -> str:
    return path if path.startswith("/") else f"/{path}"
