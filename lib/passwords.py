# =============================================================================
# lib/passwords.py - Credential Codec
# =============================================================================
# Salted password hashing for storage and verification.
#
# Stored format:
#   pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>
#
# Every call to hash_password() draws a fresh random salt, so hashing the
# same plaintext twice yields two different stored values.
#
# Usage:
#   from lib.passwords import hash_password, verify_password
#   stored = hash_password("s3cret")
#   verify_password("s3cret", stored)  # True
# =============================================================================

import hmac
import os
from hashlib import pbkdf2_hmac

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 200_000
SALT_BYTES = 16


class MalformedHashError(ValueError):
    """Raised when a stored password hash cannot be parsed."""


def _derive(password: str, *, salt: bytes, iterations: int) -> bytes:
    return pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, *, iterations: int = DEFAULT_ITERATIONS) -> str:
    """
    Hash a plaintext password with a random salt.

    Args:
        password: The plaintext password
        iterations: PBKDF2 work factor

    Returns:
        The self-describing stored form (algorithm, iterations, salt, digest)
    """
    salt = os.urandom(SALT_BYTES)
    digest = _derive(password, salt=salt, iterations=iterations)
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def _parse(stored: str) -> tuple[int, bytes, bytes]:
    try:
        algo, iters, salt_hex, digest_hex = stored.split("$", 3)
        iterations = int(iters)
        salt = bytes.fromhex(salt_hex)
        digest = bytes.fromhex(digest_hex)
    except (AttributeError, ValueError) as e:
        raise MalformedHashError(f"Unparseable password hash: {e}") from e

    if algo != ALGORITHM:
        raise MalformedHashError(f"Unsupported password hash algorithm: {algo}")
    if iterations < 1 or not salt or not digest:
        raise MalformedHashError("Password hash has empty components")

    return iterations, salt, digest


def verify_password(password: str, stored: str) -> bool:
    """
    Check a plaintext password against a stored hash.

    Re-derives the digest with the salt and work factor embedded in
    `stored` and compares in constant time.

    Returns:
        True if the password matches, False otherwise

    Raises:
        MalformedHashError: If `stored` is not a hash produced by hash_password()
    """
    iterations, salt, expected = _parse(stored)
    actual = _derive(password, salt=salt, iterations=iterations)
    return hmac.compare_digest(actual, expected)
