"""Password hashing and session token signing."""

from datetime import timedelta

import jwt
import pytest

from tutsin.core import security
from tutsin.core.config import settings
from tutsin.core.security import (
    create_session_token,
    decode_session_token,
    hash_password,
    hash_password_once,
    is_password_hash,
    verify_password,
)
from tutsin.db.enums import PrincipalType
from tutsin.db.types import utcnow
from tutsin.services.session_service import mask_ip, token_principal


def test_hash_and_verify():
    hashed = hash_password("correct horse")
    assert is_password_hash(hashed)
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_hash_password_once_keeps_existing_hash():
    hashed = hash_password("secret1")
    assert hash_password_once(hashed) == hashed
    assert hash_password_once("secret1") != "secret1"


def test_verify_against_non_hash_is_false():
    assert verify_password("secret1", "secret1") is False


def test_token_round_trip_carries_principal():
    token = create_session_token("abc", PrincipalType.ADMIN, utcnow() + timedelta(hours=1))
    payload = decode_session_token(token)
    assert payload["sub"] == "abc"
    assert payload["typ"] == "admin"
    assert token_principal(token) == PrincipalType.ADMIN


def test_tokens_are_unique_per_issue():
    expires = utcnow() + timedelta(hours=1)
    a = create_session_token("abc", PrincipalType.CLIENT, expires)
    b = create_session_token("abc", PrincipalType.CLIENT, expires)
    assert a != b


def test_expired_token_rejected():
    token = create_session_token("abc", PrincipalType.CLIENT, utcnow() - timedelta(seconds=5))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_session_token(token)
    assert token_principal(token) is None


def test_previous_secret_still_accepted(monkeypatch):
    token = create_session_token("abc", PrincipalType.CLIENT, utcnow() + timedelta(hours=1))

    monkeypatch.setattr(settings, "JWT_SECRET_PREVIOUS", settings.JWT_SECRET)
    monkeypatch.setattr(settings, "JWT_SECRET", "rotated-secret")

    assert security.decode_session_token(token)["sub"] == "abc"


def test_foreign_signature_rejected():
    forged = jwt.encode(
        {"sub": "abc", "typ": "admin", "exp": utcnow() + timedelta(hours=1)},
        "someone-else",
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidTokenError):
        decode_session_token(forged)


def test_mask_ip():
    assert mask_ip("203.0.113.77") == "203.0.113.0/24"
    assert mask_ip("not-an-ip") is None
    assert mask_ip(None) is None
