"""Error taxonomy for the pairing handshake and the proxy."""

from typing import Optional


class AuthError(Exception):
    """Pairing handshake failed; no session may be left behind."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PendingApproval(AuthError):
    """The user has not approved the pairing code yet."""


class NoServerFound(AuthError):
    """The account owns no resource that provides a server."""


class NoConnection(AuthError):
    """The server advertises no connections at all."""


class UpstreamFailure(AuthError):
    """Plex.tv answered with a non-success status or could not be reached."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ProxyError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(ProxyError):
    status_code = 401


class Unreachable(ProxyError):
    status_code = 502


class UpstreamError(ProxyError):
    """The media server answered with a non-success status."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status_code = status

    @property
    def is_auth_rejection(self) -> bool:
        return self.status_code in (401, 403)
