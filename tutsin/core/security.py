"""Security utilities: password hashing and signed session tokens."""

import uuid
from datetime import datetime, timezone

import bcrypt
import jwt

from tutsin.core.config import settings
from tutsin.db.enums import PrincipalType


# =============================================================================
# Passwords (bcrypt)
# =============================================================================

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
_BCRYPT_HASH_LENGTH = 60


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def is_password_hash(value: str) -> bool:
    """True if value already looks like a bcrypt hash."""
    return len(value) == _BCRYPT_HASH_LENGTH and value.startswith(_BCRYPT_PREFIXES)


def hash_password_once(value: str) -> str:
    """Hash a plaintext password, leaving an existing bcrypt hash untouched."""
    if is_password_hash(value):
        return value
    return hash_password(value)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


# =============================================================================
# Session Token (JWT bearer)
# =============================================================================

def create_session_token(
    subject_id: str,
    token_type: PrincipalType,
    expires_at: datetime,
) -> str:
    """
    Create signed session JWT.

    Always signs with current secret (JWT_SECRET). The ``jti`` makes every
    token unique so its hash can key a session row.
    """
    payload = {
        "sub": subject_id,
        "typ": token_type.value,
        "jti": uuid.uuid4().hex,
        "iat": datetime.now(timezone.utc),
        "exp": expires_at,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=["HS256"],
                options={"require": ["sub", "typ", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore
