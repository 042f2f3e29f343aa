"""Password Hashing — bcrypt digests for the site password and admin users.

Invariants:
    - Digests are bcrypt strings ("$2b$10$...") stored as text
    - bcrypt only reads the first 72 bytes of a secret: longer secrets (counted
      as UTF-8 bytes, not characters) are refused with a `password` field error
      instead of being hashed
    - verify_password never raises for a missing or malformed digest; it returns False
"""

import re

import bcrypt

from epetitions.core.errors import RecordValidationError

DIGEST_COST = 10
MAX_PASSWORD_BYTES = 72
PASSWORD_TOO_LONG = f"is too long (maximum is {MAX_PASSWORD_BYTES} bytes)"

_PASSWORD_RULES = (
    (re.compile(r".{8,}"), "must be at least 8 characters"),
    (re.compile(r"[A-Z]"), "must contain an upper-case letter"),
    (re.compile(r"[a-z]"), "must contain a lower-case letter"),
    (re.compile(r"[0-9]"), "must contain a digit"),
)


def exceeds_digest_limit(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str, cost: int = DIGEST_COST) -> str:
    """bcrypt digest of `password`. Raises RecordValidationError past 72 bytes."""
    if exceeds_digest_limit(password):
        raise RecordValidationError({"password": [PASSWORD_TOO_LONG]})
    return bcrypt.hashpw(
        password.encode("utf-8"), bcrypt.gensalt(rounds=cost),
    ).decode("utf-8")


def verify_password(password: str | None, digest: str | None) -> bool:
    """Check a plain password against a stored bcrypt digest."""
    if not password or not digest or exceeds_digest_limit(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), digest.encode("utf-8"))
    except ValueError:
        # malformed digest (e.g. imported from another system)
        return False


def password_policy_errors(password: str) -> list[str]:
    """Admin password policy. Returns the failed rules, empty when acceptable."""
    errors = [msg for pattern, msg in _PASSWORD_RULES if not pattern.search(password)]
    if exceeds_digest_limit(password):
        errors.append(PASSWORD_TOO_LONG)
    return errors
