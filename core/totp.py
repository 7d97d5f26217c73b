"""
TOTP (Time-based One-Time Password) implementation following RFC 6238.

Produces codes identical to Google Authenticator.
"""

import hmac
import time
from typing import Optional

from core.hotp import generate_hotp
from core.otp import DEFAULT_TIMESTEP, Algorithm, CodeLength


def time_counter(timestamp: float, timestep: float = DEFAULT_TIMESTEP) -> int:
    """Number of whole time-steps elapsed since the Unix epoch."""
    return int(timestamp // timestep)


def generate_totp(
    secret_bytes: bytes,
    length: CodeLength = CodeLength.SIX,
    timestep: float = DEFAULT_TIMESTEP,
    algorithm: Algorithm = Algorithm.SHA1,
    timestamp: Optional[float] = None,
) -> str:
    """
    Generate a TOTP code.

    Args:
        secret_bytes: Raw (already base32-decoded) secret bytes.
        length:       Number of digits in the OTP (default 6).
        timestep:     Time step in seconds (default 30).
        algorithm:    HMAC algorithm (default SHA1 for GA compatibility).
        timestamp:    Override Unix timestamp (uses time.time() if None).

    Returns:
        OTP string, zero-padded to ``length`` characters.
    """
    t = timestamp if timestamp is not None else time.time()
    return generate_hotp(secret_bytes, time_counter(t, timestep), length, algorithm)


def remaining_seconds(timestep: float = DEFAULT_TIMESTEP, timestamp: Optional[float] = None) -> float:
    """Return seconds until the current TOTP window expires."""
    t = timestamp if timestamp is not None else time.time()
    return timestep - (t % timestep)


def validate_totp(
    token: str,
    secret_bytes: bytes,
    length: CodeLength = CodeLength.SIX,
    timestep: float = DEFAULT_TIMESTEP,
    algorithm: Algorithm = Algorithm.SHA1,
    window: int = 1,
    timestamp: Optional[float] = None,
) -> bool:
    """
    Validate a TOTP token within ±``window`` time steps.

    Args:
        token:        Token to validate.
        secret_bytes: Raw secret bytes.
        length:       Expected number of digits.
        timestep:     Time step in seconds.
        algorithm:    HMAC algorithm.
        window:       Allowed skew in steps (default 1).
        timestamp:    Override Unix timestamp.

    Returns:
        True if the token is valid within the window.
    """
    t = timestamp if timestamp is not None else time.time()
    counter = time_counter(t, timestep)

    for step in range(-window, window + 1):
        if counter + step < 0:
            continue
        expected = generate_hotp(secret_bytes, counter + step, length, algorithm)
        if hmac.compare_digest(token.strip().encode("utf-8"), expected.encode("ascii")):
            return True
    return False
