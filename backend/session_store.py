"""Session persistence behind a small key-value interface.

The broker holds exactly one session per browser: the Plex token and the two
resolved server addresses, plus a short-lived pairing context while a login is
in flight. Writes are buffered and applied to the outgoing response in one go,
so a request never observes a half-written session.
"""

from typing import Optional, Protocol

from fastapi import Request
from fastapi.responses import Response

from models import PairingRequest, Session

TOKEN_KEY = "plexToken"
REMOTE_URL_KEY = "plexServerUrlRemote"
LOCAL_URL_KEY = "plexServerUrlLocal"
PIN_ID_KEY = "plexPinId"
CLIENT_ID_KEY = "plexClientId"

SESSION_KEYS = (TOKEN_KEY, REMOTE_URL_KEY, LOCAL_URL_KEY)


class SessionStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str, ttl: int) -> None: ...

    def delete(self, key: str) -> None: ...


class MemorySessionStore:
    """Dict-backed store for a single-session deployment."""

    def __init__(self):
        self._values: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str, ttl: int) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class CookieSessionStore:
    """Reads request cookies, buffers changes until `apply()`."""

    def __init__(self, request: Request, secure: Optional[bool] = None):
        self._cookies = dict(request.cookies)
        self._secure = request.url.scheme == "https" if secure is None else secure
        # key -> (value, ttl); value None means delete
        self._pending: dict[str, tuple[Optional[str], int]] = {}

    def get(self, key: str) -> Optional[str]:
        if key in self._pending:
            return self._pending[key][0]
        return self._cookies.get(key) or None

    def set(self, key: str, value: str, ttl: int) -> None:
        self._pending[key] = (value, ttl)

    def delete(self, key: str) -> None:
        self._pending[key] = (None, 0)

    def apply(self, response: Response) -> Response:
        for key, (value, ttl) in self._pending.items():
            if value is None:
                response.delete_cookie(key, path="/")
            else:
                response.set_cookie(
                    key,
                    value,
                    max_age=ttl,
                    path="/",
                    httponly=True,
                    secure=self._secure,
                    samesite="strict",
                )
        return response


# ── Session helpers ─────────────────────────────────────────────

def load_session(store: SessionStore) -> Optional[Session]:
    """Return the stored session, or None unless every field is present."""
    token = store.get(TOKEN_KEY)
    remote = store.get(REMOTE_URL_KEY)
    local = store.get(LOCAL_URL_KEY)
    if not token or not remote or not local:
        return None
    return Session(token=token, remote_address=remote, local_address=local)


def save_session(store: SessionStore, session: Session, ttl: int) -> None:
    store.set(TOKEN_KEY, session.token, ttl)
    store.set(REMOTE_URL_KEY, session.remote_address, ttl)
    store.set(LOCAL_URL_KEY, session.local_address, ttl)


def clear_session(store: SessionStore) -> None:
    for key in SESSION_KEYS:
        store.delete(key)


def load_pairing(store: SessionStore) -> Optional[PairingRequest]:
    pairing_id = store.get(PIN_ID_KEY)
    client_id = store.get(CLIENT_ID_KEY)
    if not pairing_id or not client_id:
        return None
    return PairingRequest(pairing_id=pairing_id, client_id=client_id)


def save_pairing(store: SessionStore, pairing: PairingRequest, ttl: int, client_ttl: int) -> None:
    store.set(PIN_ID_KEY, pairing.pairing_id, ttl)
    # The client id is the browser's stable identity and outlives the pairing
    store.set(CLIENT_ID_KEY, pairing.client_id, client_ttl)


def consume_pairing(store: SessionStore) -> None:
    store.delete(PIN_ID_KEY)


def get_client_id(store: SessionStore) -> Optional[str]:
    return store.get(CLIENT_ID_KEY)
