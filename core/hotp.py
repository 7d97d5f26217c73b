"""
HOTP (HMAC-based One-Time Password) implementation following RFC 4226.

Dynamic truncation is delegated to :mod:`cryptography`'s HOTP primitive.
"""

from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.twofactor import InvalidToken
from cryptography.hazmat.primitives.twofactor.hotp import HOTP

from core.otp import UINT64_MAX, Algorithm, CodeLength

_HASHES = {
    Algorithm.SHA1: hashes.SHA1,
    Algorithm.SHA256: hashes.SHA256,
    Algorithm.SHA512: hashes.SHA512,
}


def _hotp(secret_bytes: bytes, length: CodeLength, algorithm: Algorithm) -> HOTP:
    # Provisioned secrets are often 80 bits, below the library's 128-bit floor.
    return HOTP(secret_bytes, int(length), _HASHES[algorithm](), enforce_key_length=False)


def generate_hotp(
    secret_bytes: bytes,
    counter: int,
    length: CodeLength = CodeLength.SIX,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """
    Generate an HOTP code.

    Args:
        secret_bytes: Raw decoded secret bytes.
        counter:      Synchronisation counter value (unsigned 64-bit).
        length:       Number of OTP digits.
        algorithm:    HMAC algorithm.

    Returns:
        Zero-padded OTP string.
    """
    return _hotp(secret_bytes, length, algorithm).generate(counter).decode("ascii")


def validate_hotp(
    token: str,
    secret_bytes: bytes,
    counter: int,
    length: CodeLength = CodeLength.SIX,
    algorithm: Algorithm = Algorithm.SHA1,
    look_ahead: int = 10,
) -> Optional[int]:
    """
    Validate an HOTP token and return the synchronised counter value.

    Args:
        token:        Token to validate.
        secret_bytes: Raw secret bytes.
        counter:      Current counter.
        length:       Expected OTP length.
        algorithm:    HMAC algorithm.
        look_ahead:   Max steps to search ahead for resync.

    Returns:
        The new counter value if valid, or None if invalid.
    """
    hotp = _hotp(secret_bytes, length, algorithm)
    candidate = token.strip().encode("utf-8")
    for i in range(look_ahead + 1):
        if counter + i > UINT64_MAX:
            break
        try:
            hotp.verify(candidate, counter + i)
        except InvalidToken:
            continue
        return counter + i + 1
    return None
