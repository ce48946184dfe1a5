"""Shared fixtures: settings, in-memory store and a fake Plex.tv / Plex server."""

import json
from typing import Callable

import httpx
import pytest

from config import Settings
from models import DeploymentMode, Session
from session_store import MemorySessionStore

PLEX_TV = "https://plex.tv/api/v2"
REMOTE_URL = "https://1-2-3-4.abc123.plex.direct:32400"
LOCAL_URL = "http://192.168.1.10:32400"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        plex_tv_url=PLEX_TV,
        deployment_mode=DeploymentMode.REMOTE,
        pin_retry_delay=0.0,
    )


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def session() -> Session:
    return Session(token="tok-123", remote_address=REMOTE_URL, local_address=LOCAL_URL)


def json_response(data, status: int = 200) -> httpx.Response:
    return httpx.Response(status, content=json.dumps(data).encode(), headers={"content-type": "application/json"})


def server_resource(connections: list[dict] | None = None) -> dict:
    if connections is None:
        connections = [
            {"protocol": "https", "address": "1.2.3.4", "port": 32400, "local": False, "uri": REMOTE_URL},
            {"protocol": "https", "address": "192.168.1.10", "port": 32400, "local": True,
             "uri": "https://192-168-1-10.abc123.plex.direct:32400"},
        ]
    return {"name": "Home", "provides": "server", "connections": connections}


class FakeUpstream:
    """Routes requests to handlers keyed by (method, path) and records calls."""

    def __init__(self):
        self.routes: dict[tuple[str, str], list[Callable[[httpx.Request], httpx.Response]]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *handlers):
        """Each call consumes the next handler; the last one repeats."""
        self.routes[(method, path)] = list(handlers)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handlers = self.routes.get((request.method, request.url.path))
        if not handlers:
            return httpx.Response(404, text="not found")
        handler = handlers.pop(0) if len(handlers) > 1 else handlers[0]
        return handler(request)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
