"""
auth/passwords.py -- Password hashing and verification.

Argon2id via argon2-cffi. PasswordHasher draws a fresh random salt for every
hash, so two admins with the same password never share a hash, and the salt
and cost parameters travel inside the encoded hash string so verification
needs nothing else.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError

from core.errors import HashingError

_hasher = PasswordHasher()


def hash_password(plain: str) -> str:
    """Return a salted Argon2id hash of plain. Raises HashingError on failure."""
    try:
        return _hasher.hash(plain)
    except (Argon2HashingError, TypeError) as exc:
        raise HashingError("Password could not be hashed.") from exc


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if plain matches the Argon2 hash.

    A malformed stored hash is a mismatch, not an error: the caller only needs
    yes or no.
    """
    try:
        return _hasher.verify(hashed, plain)
    except (VerificationError, InvalidHashError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. AdminService.authenticate() verifies against
# this when the email is unknown, so an absent account costs the same Argon2
# work as a wrong password.
DUMMY_HASH: str = hash_password("sigma_timing_dummy")
