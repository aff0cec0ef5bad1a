"""Session service - issues, resolves and revokes client/admin bearer sessions.

A token is only honored while both its JWT signature/expiry verify and a
matching session row (keyed by the SHA-256 of the token) exists in the
table for its principal type.
"""

import hashlib
import ipaddress
import logging
from datetime import timedelta

import jwt
from fastapi import Request

from tutsin.core.config import settings
from tutsin.core.security import create_session_token, decode_session_token
from tutsin.db.enums import PrincipalType
from tutsin.db.models import AdminSession, ClientSession
from tutsin.db.types import utcnow
from tutsin.storage.base import Storage

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    """Create SHA256 hash of a session token for storage and lookup."""
    return hashlib.sha256(token.encode()).hexdigest()


def mask_ip(ip_address: str | None) -> str | None:
    """Mask IP for logs to avoid storing raw PII."""
    if not ip_address:
        return None
    try:
        ip_obj = ipaddress.ip_address(ip_address)
    except ValueError:
        return None
    if isinstance(ip_obj, ipaddress.IPv4Address):
        network = ipaddress.ip_network(f"{ip_address}/24", strict=False)
        return f"{network.network_address}/24"
    network = ipaddress.ip_network(f"{ip_address}/64", strict=False)
    return f"{network.network_address}/64"


def get_client_ip(request: Request | None) -> str | None:
    """Extract client IP from request, handling proxies."""
    if not request:
        return None

    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return None


def get_user_agent(request: Request | None) -> str | None:
    if not request:
        return None
    user_agent = request.headers.get("user-agent")
    return user_agent[:500] if user_agent else None


def _decode_for(token: str, principal: PrincipalType) -> dict | None:
    try:
        payload = decode_session_token(token)
    except jwt.InvalidTokenError:
        return None
    if payload.get("typ") != principal.value:
        return None
    return payload


# =============================================================================
# Client sessions
# =============================================================================

def create_client_session(storage: Storage, client_id: str) -> str:
    """Issue a client token and persist its session row. Returns the token."""
    expires_at = utcnow() + timedelta(hours=settings.CLIENT_SESSION_HOURS)
    token = create_session_token(client_id, PrincipalType.CLIENT, expires_at)
    storage.create_client_session(
        {"token_hash": hash_token(token), "client_id": client_id, "expires_at": expires_at}
    )
    logger.info("Created session for client %s", client_id)
    return token


def resolve_client_session(storage: Storage, token: str) -> ClientSession | None:
    payload = _decode_for(token, PrincipalType.CLIENT)
    if payload is None:
        return None
    session = storage.get_client_session(hash_token(token))
    if session is None or session.client_id != payload["sub"]:
        return None
    return session


def revoke_client_session(storage: Storage, token: str) -> bool:
    deleted = storage.delete_client_session(hash_token(token))
    if deleted:
        logger.info("Revoked client session")
    return deleted


# =============================================================================
# Admin sessions
# =============================================================================

def create_admin_session(
    storage: Storage,
    admin_id: str,
    request: Request | None = None,
) -> str:
    """Issue an admin token, recording the caller's IP and user agent."""
    expires_at = utcnow() + timedelta(hours=settings.ADMIN_SESSION_HOURS)
    token = create_session_token(admin_id, PrincipalType.ADMIN, expires_at)
    ip_address = get_client_ip(request)
    storage.create_admin_session(
        {
            "token_hash": hash_token(token),
            "admin_id": admin_id,
            "expires_at": expires_at,
            "ip_address": ip_address,
            "user_agent": get_user_agent(request),
        }
    )
    logger.info("Created session for admin %s (ip: %s)", admin_id, mask_ip(ip_address))
    return token


def resolve_admin_session(storage: Storage, token: str) -> AdminSession | None:
    payload = _decode_for(token, PrincipalType.ADMIN)
    if payload is None:
        return None
    session = storage.get_admin_session(hash_token(token))
    if session is None or session.admin_id != payload["sub"]:
        return None
    return session


def revoke_admin_session(storage: Storage, token: str) -> bool:
    deleted = storage.delete_admin_session(hash_token(token))
    if deleted:
        logger.info("Revoked admin session")
    return deleted


def token_principal(token: str) -> PrincipalType | None:
    """Return the principal type a valid token was issued for."""
    try:
        payload = decode_session_token(token)
    except jwt.InvalidTokenError:
        return None
    try:
        return PrincipalType(payload.get("typ"))
    except ValueError:
        return None


# =============================================================================
# Cleanup
# =============================================================================

def cleanup_all_expired_sessions(storage: Storage) -> tuple[int, int]:
    """
    Delete expired client and admin sessions.

    Returns:
        (client sessions removed, admin sessions removed)
    """
    clients = storage.clean_expired_client_sessions()
    admins = storage.clean_expired_admin_sessions()
    if clients or admins:
        logger.info("Cleaned up %d expired client and %d expired admin sessions", clients, admins)
    return clients, admins
