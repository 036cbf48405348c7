"""
app/security package marker.
"""

from app.security.passwords import generate_password, hash_password, verify_password

__all__ = ["generate_password", "hash_password", "verify_password"]
