"""Plex.tv API client — pairing PINs and account resources."""

import logging
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from config import Settings
from errors import UpstreamFailure
from models import Pin, Resource

logger = logging.getLogger(__name__)


class PlexTvClient:
    """Thin wrapper over the directory endpoints used by the login flow."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings):
        self.http = http
        self.settings = settings

    def _headers(self, client_id: str, token: str | None = None) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "X-Plex-Client-Identifier": client_id,
        }
        if token:
            headers["X-Plex-Token"] = token
        return headers

    async def _request(self, method: str, path: str, what: str, **kwargs) -> httpx.Response:
        url = f"{self.settings.plex_tv_url.rstrip('/')}{path}"
        try:
            resp = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Plex.tv %s failed: %s", what, e)
            raise UpstreamFailure(f"Failed to contact Plex ({what}): {e}")

        if not resp.is_success:
            logger.error(
                "Plex.tv %s failed. Status: %d, Body: %s",
                what, resp.status_code, resp.text[:500],
            )
            raise UpstreamFailure(
                f"Failed to verify authentication with Plex ({what} failed - status {resp.status_code})",
                status=resp.status_code,
            )
        return resp

    async def create_pin(self, client_id: str) -> Pin:
        """Request a new strong pairing PIN."""
        resp = await self._request(
            "POST", "/pins", "PIN creation",
            params={"strong": "true"},
            headers={**self._headers(client_id), "X-Plex-Product": self.settings.product},
        )
        return self._parse_pin(resp)

    async def get_pin(self, pin_id: str, client_id: str) -> Pin:
        resp = await self._request(
            "GET", f"/pins/{pin_id}", "PIN check",
            headers=self._headers(client_id),
        )
        return self._parse_pin(resp)

    async def get_resources(self, token: str, client_id: str) -> list[Resource]:
        resp = await self._request(
            "GET", "/resources", "resource lookup",
            params={"includeHttps": "1"},
            headers=self._headers(client_id, token),
        )
        try:
            data = resp.json()
            return [Resource.model_validate(r) for r in data]
        except (ValueError, TypeError, ValidationError) as e:
            raise UpstreamFailure(f"Unexpected resources response from Plex: {e}")

    def auth_url(self, client_id: str, code: str, forward_url: str) -> str:
        """URL of the Plex page where the user approves the PIN."""
        params = {
            "clientID": client_id,
            "code": code,
            "forwardUrl": forward_url,
            "context[device][product]": self.settings.product,
        }
        return f"{self.settings.plex_auth_url}#?{urlencode(params)}"

    @staticmethod
    def _parse_pin(resp: httpx.Response) -> Pin:
        try:
            return Pin.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamFailure(f"Unexpected PIN response from Plex: {e}")
