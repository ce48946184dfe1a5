"""Pairing handshake — turns an approved PIN into a stored session.

Steps:
1. Poll the PIN for its auth token, retrying per `RetryPolicy` while the user
   hasn't approved it yet.
2. List the account's resources and take the first one that provides a server.
3. Resolve remote/local addresses from that server's connections.
4. Persist token + addresses together.

Any failure clears the pairing id and every session field, including a
session left over from an earlier login.
"""

import asyncio
import logging
from dataclasses import dataclass

from config import Settings
from errors import AuthError, NoServerFound, PendingApproval
from models import PairingRequest, Session
from services.connections import select_addresses
from services.plex_tv import PlexTvClient
from session_store import SessionStore, clear_session, consume_pairing, save_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 1  # retries after the first poll
    delay: float = 2.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(attempts=settings.pin_retry_attempts, delay=settings.pin_retry_delay)


async def wait_for_token(
    plex_tv: PlexTvClient, pairing: PairingRequest, policy: RetryPolicy,
) -> str:
    """Poll the PIN until it carries a token or the policy is exhausted."""
    for attempt in range(policy.attempts + 1):
        if attempt:
            logger.warning(
                "No authToken received yet, waiting %.1fs and retrying (%d/%d)...",
                policy.delay, attempt, policy.attempts,
            )
            await asyncio.sleep(policy.delay)
        pin = await plex_tv.get_pin(pairing.pairing_id, pairing.client_id)
        if pin.auth_token:
            return pin.auth_token

    logger.error("No authToken received for PIN %s after retry.", pairing.pairing_id)
    raise PendingApproval(
        "No auth token received from Plex after retry. Please complete the login on Plex.tv."
    )


async def complete_handshake(
    plex_tv: PlexTvClient,
    store: SessionStore,
    pairing: PairingRequest,
    settings: Settings,
    policy: RetryPolicy | None = None,
) -> Session:
    policy = policy or RetryPolicy.from_settings(settings)
    logger.info("Checking PIN %s with client %s", pairing.pairing_id, pairing.client_id)

    try:
        token = await wait_for_token(plex_tv, pairing, policy)
        logger.info("Auth token received, fetching resources...")

        resources = await plex_tv.get_resources(token, pairing.client_id)
        server = next((r for r in resources if r.is_server), None)
        if server is None:
            raise NoServerFound("No Plex server found associated with your account.")
        logger.info("Using server %r with %d connections", server.name, len(server.connections))
        logger.debug("Raw connections: %s", [c.model_dump() for c in server.connections])

        addresses = select_addresses(server.connections)
    except AuthError as e:
        logger.error("Error during authentication process: %s", e)
        consume_pairing(store)
        clear_session(store)
        raise

    session = Session(token=token, remote_address=addresses.remote, local_address=addresses.local)
    save_session(store, session, settings.session_max_age)
    consume_pairing(store)
    logger.info("Session stored for server %r", server.name)
    return session
