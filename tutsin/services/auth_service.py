"""Client account service - registration, credential checks and profile updates."""

import logging

from tutsin.core.security import hash_password, hash_password_once, verify_password
from tutsin.db.models import Client
from tutsin.schemas.auth import ClientLogin, ClientProfileUpdate, ClientRegister
from tutsin.services import session_service
from tutsin.storage.base import Storage, StorageConflictError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthenticationError(Exception):
    """Credentials were rejected. The message is safe to show to callers."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register_client(storage: Storage, data: ClientRegister) -> tuple[Client, str]:
    """
    Create a client account and open its first session.

    Raises:
        ValueError: If the email is already registered
    """
    email = normalize_email(data.email)
    if storage.get_client_by_email(email) is not None:
        raise ValueError("Email already registered")

    fields = data.model_dump()
    fields["email"] = email
    fields["password"] = hash_password(data.password)
    try:
        client = storage.create_client(fields)
    except StorageConflictError as exc:
        raise ValueError("Email already registered") from exc
    token = session_service.create_client_session(storage, client.id)
    logger.info("Registered client %s", client.id)
    return client, token


def login_client(storage: Storage, data: ClientLogin) -> tuple[Client, str]:
    """
    Verify credentials and open a session.

    Unknown email and wrong password fail identically.

    Raises:
        AuthenticationError: If credentials are invalid
    """
    client = storage.get_client_by_email(normalize_email(data.email))
    if client is None or not verify_password(data.password, client.password):
        logger.info("Failed client login attempt")
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = session_service.create_client_session(storage, client.id)
    return client, token


def update_client_profile(storage: Storage, client: Client, data: ClientProfileUpdate) -> Client:
    """
    Apply a partial profile update.

    Raises:
        ValueError: If the new email belongs to another client
    """
    changes = data.model_dump(exclude_unset=True)
    if "email" in changes and changes["email"] is not None:
        changes["email"] = normalize_email(changes["email"])
        existing = storage.get_client_by_email(changes["email"])
        if existing is not None and existing.id != client.id:
            raise ValueError("Email already registered")
    if changes.get("password"):
        changes["password"] = hash_password_once(changes["password"])
    # Required columns cannot be cleared
    for field in ("first_name", "last_name", "email", "password"):
        if field in changes and changes[field] is None:
            del changes[field]

    try:
        updated = storage.update_client(client.id, changes)
    except StorageConflictError as exc:
        raise ValueError("Email already registered") from exc
    if updated is None:
        raise ValueError("Client not found")
    return updated
