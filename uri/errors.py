"""
Errors raised while parsing an ``otpauth://`` URI.

There is one exception type per validation step so that callers can tell
failures apart by type alone. All of them derive from :class:`URIParseError`,
itself a :class:`ValueError`.
"""

from typing import Optional


class URIParseError(ValueError):
    """Base class for otpauth URI validation failures."""

    message = "Invalid otpauth URI."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


class InvalidURIError(URIParseError):
    message = "The string is not a syntactically valid URI."


class MissingSchemeError(URIParseError):
    message = "The URI has no scheme."


class InvalidSchemeError(URIParseError):
    message = "Expected the 'otpauth' scheme."


class MissingOTPTypeError(URIParseError):
    message = "The URI is missing the OTP type."


class InvalidOTPTypeError(URIParseError):
    message = "Unknown OTP type. Expected totp or hotp."


class MissingQueryItemsError(URIParseError):
    message = "The URI has no query items."


class MissingCounterError(URIParseError):
    message = "HOTP URI requires a valid 'counter' parameter."


class MissingPeriodError(URIParseError):
    message = "TOTP URI requires a valid 'period' parameter."


class InvalidPeriodError(URIParseError):
    message = "'period' must be a positive number of seconds."


class MissingSecretError(URIParseError):
    message = "Missing 'secret' parameter in otpauth URI."


class InvalidAlgorithmError(URIParseError):
    message = "Unsupported algorithm. Supported: SHA1, SHA256, SHA512."


class InvalidCodeLengthError(URIParseError):
    message = "Unsupported number of digits. Supported: 6, 7, 8."
