# =============================================================================
# lib/tokens.py - Token Service
# =============================================================================
# Issues and verifies signed, time-limited identity tokens (HS256 JWT).
#
# Tokens are self-contained: nothing is persisted at issuance and there is
# no revocation list. Expiry is the only way a token stops working.
#
# Usage:
#   token = create_token({"sub": "42", "email": "a@x.com"}, secret)
#   claims = verify_token(token, secret)   # {"sub": "42", "email": "a@x.com"}
# =============================================================================

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

DEFAULT_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(days=7)

# Claims added by create_token() and removed again by verify_token()
_TIME_CLAIMS = ("iat", "exp")

# Registered claims verify_token() would check against values it is never given
_RESERVED_CLAIMS = _TIME_CLAIMS + ("nbf", "aud", "iss", "jti")


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(TokenError):
    """The token's expiry time has passed."""


class TokenInvalidError(TokenError):
    """The token is malformed or its signature doesn't match the secret."""


def create_token(
    claims: dict[str, Any],
    secret: str,
    ttl: timedelta = DEFAULT_TOKEN_TTL,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    now: datetime | None = None,
) -> str:
    """
    Sign `claims` into a token that expires `ttl` from now.

    Args:
        claims: Identity claims (e.g. {"sub": "42", "email": "a@x.com"})
        secret: HMAC signing secret
        ttl: Lifetime of the token
        algorithm: JWT signing algorithm
        now: Issue time override (defaults to current UTC time)

    Returns:
        The encoded token string

    Raises:
        ValueError: If secret is empty, claims use reserved keys or `sub`
            is not a string
    """
    if not secret:
        raise ValueError("Token secret must not be empty")

    reserved = [key for key in _RESERVED_CLAIMS if key in claims]
    if reserved:
        raise ValueError(f"Claims may not set reserved keys: {reserved}")

    if "sub" in claims and not isinstance(claims["sub"], str):
        raise ValueError("The sub claim must be a string")

    issued_at = now or datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(
    token: str,
    secret: str,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
) -> dict[str, Any]:
    """
    Verify a token and return the claims it was issued with.

    Args:
        token: Encoded token string
        secret: HMAC secret the token must have been signed with
        algorithm: Expected signing algorithm

    Returns:
        The issued claims, without the iat/exp time claims

    Raises:
        TokenExpiredError: If the current time is past the token's expiry
        TokenInvalidError: If the token is malformed or the signature is wrong
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except JWTError as e:
        raise TokenInvalidError(f"Token is invalid: {e}") from e

    return {key: value for key, value in payload.items() if key not in _TIME_CLAIMS}
