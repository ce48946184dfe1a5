"""Pick the remote and local address out of a server's advertised connections."""

import ipaddress
import logging
from typing import Optional
from urllib.parse import urlparse

from errors import NoConnection
from models import Connection, ResolvedAddresses

logger = logging.getLogger(__name__)

# Plex's relay domain; these hostnames traverse NAT for direct connections
RELAY_DOMAIN = ".plex.direct"


def _is_relay(conn: Connection) -> bool:
    host = urlparse(conn.uri).hostname or conn.address
    return host.lower().endswith(RELAY_DOMAIN)


def _is_loopback(address: str) -> bool:
    if address.lower() == "localhost":
        return True
    try:
        return ipaddress.ip_address(address.strip("[]")).is_loopback
    except ValueError:
        return False


def _local_url(conn: Connection) -> str:
    """Plain-HTTP URL from the bare address and port.

    The advertised uri/protocol of local entries is ignored: Plex often lists
    them with a plex.direct hostname or https that isn't reachable on the LAN.
    """
    host = conn.address
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"http://{host}:{conn.port}"


def select_remote(connections: list[Connection]) -> Optional[str]:
    remote_https = [c for c in connections if c.protocol == "https" and not c.local]
    for conn in remote_https:
        if _is_relay(conn):
            return conn.uri
    if remote_https:
        return remote_https[0].uri

    logger.warning("No remote HTTPS connection found. Using first HTTPS or first overall.")
    for conn in connections:
        if conn.protocol == "https":
            return conn.uri
    return connections[0].uri if connections else None


def select_local(connections: list[Connection]) -> Optional[str]:
    local = [c for c in connections if c.local]
    if not local:
        return None
    preferred = next((c for c in local if not _is_loopback(c.address)), local[0])
    return _local_url(preferred)


def select_addresses(connections: list[Connection]) -> ResolvedAddresses:
    """Resolve the best remote and local URLs.

    Falls back to the remote URL for local when no local connection exists.
    Raises NoConnection only for an empty connection list.
    """
    if not connections:
        raise NoConnection("Could not find suitable connection URLs for your Plex server.")

    remote = select_remote(connections)
    local = select_local(connections)
    if local is None:
        logger.warning("No local connection data found. Using remote URL as local fallback.")
        local = remote

    if not remote or not local:
        raise NoConnection("Could not find suitable connection URLs for your Plex server.")

    logger.info("Selected remote URL: %s", remote)
    logger.info("Selected local URL: %s", local)
    return ResolvedAddresses(remote=remote, local=local)
