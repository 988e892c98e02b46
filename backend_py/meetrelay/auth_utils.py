"""Helpers for room password handling.

Room passwords are optional and only gate admission. They are hashed
with passlib when the room is created so the plain text never sits in
the registry; a join attempt is accepted only when the supplied value
verifies against that hash.
"""

from __future__ import annotations

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plain-text room password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str | None, hashed_password: str) -> bool:
    """Verify a join attempt's password against the stored hash."""
    if plain_password is None:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False
