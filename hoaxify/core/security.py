"""Security helpers (hashing and verification)."""

from __future__ import annotations

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"

# Verified against when the e-mail is unknown, so both failure paths pay for one hash.
_DUMMY_HASH = f"{_PREFIX}{_ph.hash('hoaxify-dummy-password')}"


def hash_password(password: str) -> str:
    """Create an Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return False
    try:
        return _ph.verify(stored[len(_PREFIX) :], password or "")
    except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
        return False


def burn_password_check(password: str) -> None:
    """Spend the same hashing cost as a real verification, discarding the result."""
    verify_password(password, _DUMMY_HASH)


def needs_rehash(stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored.startswith(_PREFIX):
        return True
    try:
        return _ph.check_needs_rehash(stored[len(_PREFIX) :])
    except argon_exc.InvalidHashError:
        return True
