"""
app/security/passwords.py

Initial credential generation and bcrypt hashing for imported users.
"""

from __future__ import annotations

import secrets
import string

import bcrypt

BCRYPT_ROUNDS = 10

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_password(length: int = 8) -> str:
    """
    Return a random alphanumeric password of ``length`` characters.
    """

    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(max(1, length)))


def hash_password(password: str, *, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
