"""
Base32 helpers for OTP secrets.
"""

import base64
import binascii
import re


class InvalidSecretError(ValueError):
    """The secret is not valid Base32 text."""


# ── Base32 ────────────────────────────────────────────────────────────────────

def normalize_secret(secret: str) -> str:
    """
    Normalise a base32 secret: strip spaces, uppercase, add padding.

    Args:
        secret: Raw user-supplied secret string.

    Returns:
        Uppercase base32 string with correct padding.

    Raises:
        InvalidSecretError: If the string contains invalid base32 characters.
    """
    secret = secret.strip().replace(" ", "").replace("-", "")
    # Base32 alphabet: A-Z and 2-7 in either case, padding only at the end.
    # Must run before upper(): "ß".upper() == "SS".
    if not re.fullmatch(r"[A-Za-z2-7]+=*", secret):
        raise InvalidSecretError("Secret contains invalid base32 characters.")
    secret = secret.upper().rstrip("=")
    # Pad to multiple of 8
    pad = (8 - len(secret) % 8) % 8
    return secret + "=" * pad


def decode_secret(secret: str) -> bytes:
    """
    Decode a base32-encoded secret string to raw bytes.

    Args:
        secret: Base32 secret (spaces and dashes are stripped).

    Returns:
        Raw bytes, never empty.

    Raises:
        InvalidSecretError: On invalid base32 input.
    """
    try:
        raw = base64.b32decode(normalize_secret(secret), casefold=True)
    except binascii.Error as exc:
        raise InvalidSecretError(f"Invalid base32 secret: {exc}") from exc
    if not raw:
        raise InvalidSecretError("Secret decodes to no key material.")
    return raw


def encode_secret(raw: bytes) -> str:
    """Encode raw bytes as a base32 string (no padding)."""
    return base64.b32encode(raw).decode("ascii").rstrip("=")
