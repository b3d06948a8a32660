"""Security Primitives — bcrypt password hashing and PyJWT token issuance/verification.

Invariants:
    - Plaintext passwords are never stored, returned, or logged
    - verify_password is constant-time (bcrypt.checkpw) and never raises
    - Verification tokens carry purpose="email_verification"; session tokens
      never decode as verification tokens
    - Every token carries iat/exp; expired or tampered tokens raise InvalidTokenError

Design Decisions:
    - Registration and login tokens keep different claim shapes ({id, email} vs
      {userId}); clients must not assume a uniform session claim shape
    - Functions receive Settings explicitly: no ambient secret lookups, easy to test
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from enrollment.config import Settings
from enrollment.core.errors import InvalidTokenError

VERIFICATION_PURPOSE = "email_verification"

# bcrypt only reads the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(plain_password: str) -> bytes:
    return (plain_password or "").encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain_password: str, rounds: int = 10) -> str:
    """Salted, adaptive-cost one-way hash."""
    password = _password_bytes(plain_password)
    if not password:
        raise ValueError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = _password_bytes(plain_password)
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _sign(claims: dict[str, Any], settings: Settings, expire_minutes: int) -> str:
    now = _utc_now()
    payload = {
        **claims,
        "iat": now,
        "exp": now + timedelta(minutes=expire_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict[str, Any]:
    """Authenticate signature and expiry. Raises InvalidTokenError."""
    raw = (token or "").strip()
    if not raw:
        raise InvalidTokenError("empty token")
    try:
        return jwt.decode(
            raw, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidTokenError("expired") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError("bad signature or format") from exc


def build_registration_token(parent_id: int, email: str, settings: Settings) -> str:
    """Session token issued right after registration: {id, email}, 1 day by default."""
    return _sign(
        {"id": parent_id, "email": email},
        settings, settings.registration_token_expire_minutes,
    )


def build_login_token(parent_id: int, settings: Settings) -> str:
    """Session token issued at login: {userId}, 1 hour by default."""
    return _sign(
        {"userId": parent_id}, settings, settings.login_token_expire_minutes,
    )


def build_verification_token(email: str, settings: Settings) -> str:
    return _sign(
        {"email": email, "purpose": VERIFICATION_PURPOSE},
        settings, settings.verification_token_expire_minutes,
    )


def decode_verification_token(token: str, settings: Settings) -> str:
    """Return the email bound to a verification token."""
    payload = decode_token(token, settings)
    if payload.get("purpose") != VERIFICATION_PURPOSE:
        raise InvalidTokenError("not a verification token")
    email = payload.get("email")
    if not isinstance(email, str) or not email:
        raise InvalidTokenError("missing email claim")
    return email
