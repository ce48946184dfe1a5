"""Pydantic models shared across the application."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class DeploymentMode(str, Enum):
    """Which of the two resolved server addresses the proxy uses."""
    LOCAL = "local"
    REMOTE = "remote"


# ── Session models ──────────────────────────────────────────────

class Session(BaseModel):
    """Credential plus resolved addresses for the paired server."""
    token: str
    remote_address: str
    local_address: str

    def address_for(self, mode: DeploymentMode) -> str:
        if mode is DeploymentMode.LOCAL:
            return self.local_address
        return self.remote_address


class PairingRequest(BaseModel):
    """Short-lived pairing context, consumed once by the handshake."""
    pairing_id: str
    client_id: str


# ── Plex.tv directory models ────────────────────────────────────

class Pin(BaseModel):
    id: int
    code: str = ""
    auth_token: Optional[str] = Field(None, alias="authToken")


class Connection(BaseModel):
    """One advertised way to reach a server."""
    protocol: str = "http"  # "http" | "https"
    address: str = ""
    port: int = 32400
    local: bool = False
    uri: str = ""


class Resource(BaseModel):
    name: str = ""
    provides: str = ""  # comma separated, e.g. "server,player"
    connections: list[Connection] = []

    @property
    def is_server(self) -> bool:
        return "server" in [p.strip() for p in self.provides.split(",")]


class ResolvedAddresses(BaseModel):
    remote: str
    local: str


# ── Proxy models ────────────────────────────────────────────────

class ProxiedResponse(BaseModel):
    """Successful upstream reply, ready to be relayed to the browser."""
    content: bytes = b""
    data: Any = None  # parsed JSON for API calls
    media_type: str = "application/octet-stream"
    cache_seconds: int = 0

    @property
    def cache_control(self) -> str:
        if self.cache_seconds <= 0:
            return "no-cache, no-store"
        return f"public, max-age={self.cache_seconds}, s-maxage={self.cache_seconds}"


class SessionStatus(BaseModel):
    authenticated: bool
    server_url: Optional[str] = None
