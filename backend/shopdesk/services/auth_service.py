# Overview: Operator PIN gate and bearer session tokens.

"""
Operator Authentication

WHY: The shop has a single operator account protected by a PIN. The PIN is
hashed with bcrypt when the app starts; the plaintext is never kept.

SESSIONS:
- Cryptographically secure random tokens (32 bytes, hex)
- Only the SHA-256 of a token is kept (in process memory, single process)
- Absolute timeout from SESSION_TTL_MINUTES; logout revokes
"""

import hashlib
import secrets
from datetime import datetime, timedelta

import bcrypt

from shopdesk.time_utils import utcnow


class PinValidationError(Exception):
    """Raised when a configured PIN is unusable."""
    pass


def hash_pin(pin: str, rounds: int = 12) -> str:
    """
    Hash the operator PIN using bcrypt (cost factor 12 unless configured).

    PINs must be 4 to 12 digits.
    """
    if not isinstance(pin, str) or not pin.isdigit() or not 4 <= len(pin) <= 12:
        raise PinValidationError("PIN must be 4 to 12 digits")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(pin.encode('utf-8'), salt).decode('utf-8')


def verify_pin(pin: str, pin_hash: str) -> bool:
    """Returns True if pin matches the bcrypt hash, False otherwise."""
    if not pin or not pin_hash:
        return False
    try:
        return bcrypt.checkpw(pin.encode('utf-8'), pin_hash.encode('utf-8'))
    except ValueError:
        return False


def generate_token() -> str:
    return secrets.token_hex(32)  # 32 bytes = 64 hex characters


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(sessions: dict[str, datetime], ttl_minutes: int) -> tuple[str, datetime]:
    """
    Issue a new operator session.

    Returns (plaintext_token, expires_at). Only the token hash is stored.
    """
    now = utcnow()
    _purge_expired(sessions, now)
    token = generate_token()
    expires_at = now + timedelta(minutes=ttl_minutes)
    sessions[hash_token(token)] = expires_at
    return token, expires_at


def validate_session(sessions: dict[str, datetime], token: str) -> bool:
    if not token:
        return False
    expires_at = sessions.get(hash_token(token))
    if expires_at is None:
        return False
    if expires_at <= utcnow():
        sessions.pop(hash_token(token), None)
        return False
    return True


def revoke_session(sessions: dict[str, datetime], token: str) -> bool:
    return sessions.pop(hash_token(token), None) is not None


def _purge_expired(sessions: dict[str, datetime], now: datetime) -> None:
    for key in [k for k, expires_at in sessions.items() if expires_at <= now]:
        del sessions[key]
