"""
Parse otpauth:// URIs as defined by the Google Authenticator Key URI Format.

Reference: https://github.com/google/google-authenticator/wiki/Key-Uri-Format

Validation runs in a fixed order and stops at the first failure, raising the
:mod:`uri.errors` exception for that step::

    syntax -> scheme -> OTP type -> query -> counter/period -> secret
           -> label -> algorithm -> digits

How missing or malformed ``counter`` / ``period`` / ``algorithm`` values are
treated depends on the :class:`ParsePolicy` given to :class:`URIParser`.
"""

import logging
import math
import re
import urllib.parse
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from core.otp import (
    DEFAULT_ALGORITHM,
    DEFAULT_CODE_LENGTH,
    DEFAULT_COUNTER_BASED,
    DEFAULT_TIME_BASED,
    UINT64_MAX,
    Algorithm,
    CodeLength,
    CounterBased,
    Kind,
    KindKey,
    TimeBased,
)
from core.utils import decode_secret
from uri.errors import (
    InvalidAlgorithmError,
    InvalidCodeLengthError,
    InvalidOTPTypeError,
    InvalidPeriodError,
    InvalidSchemeError,
    InvalidURIError,
    MissingCounterError,
    MissingOTPTypeError,
    MissingPeriodError,
    MissingQueryItemsError,
    MissingSchemeError,
    MissingSecretError,
)

logger = logging.getLogger(__name__)

SCHEME = "otpauth"
LABEL_SEPARATOR = ":"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# RFC 3986 Appendix B: scheme, authority, path, query, fragment
_URI_RE = re.compile(r"(?:([^:/?#]+):)?(?://([^/?#]*))?([^?#]*)(?:\?([^#]*))?(?:#(.*))?", re.DOTALL)
_URI_CHARS_RE = re.compile(r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]*")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*")
_PORT_RE = re.compile(r":[0-9]*$")

_UNSIGNED_RE = re.compile(r"[0-9]+")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_NUMBER_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class ItemKey(str, Enum):
    """Names of the query items understood in an otpauth URI."""

    ALGORITHM = "algorithm"
    COUNTER = "counter"
    DIGITS = "digits"
    ISSUER = "issuer"
    PERIOD = "period"
    SECRET = "secret"


class ParsePolicy(Enum):
    """
    How strictly the kind-specific parameter and the algorithm are checked.

    LENIENT
        A missing or malformed ``counter`` becomes 0, a missing or malformed
        ``period`` becomes 30 seconds, and an unknown ``algorithm`` becomes
        SHA1.
    STRICT
        ``counter`` (HOTP) and ``period`` (TOTP) are required, and unknown
        algorithms are rejected.
    """

    LENIENT = "lenient"
    STRICT = "strict"


@dataclass(frozen=True)
class ParsedURI:
    """The fields extracted from a valid otpauth URI."""

    issuer: Optional[str]
    account: Optional[str]
    secret: bytes = field(repr=False)
    code_length: CodeLength
    algorithm: Algorithm
    kind: Kind


QueryItems = Dict[str, Optional[str]]


# ── Parser ────────────────────────────────────────────────────────────────────

class URIParser:
    """
    Validates ``otpauth://`` URIs and extracts their credential fields.

    Usage::

        parsed = URIParser(ParsePolicy.STRICT).parse(uri)

    A parser keeps no state between calls and may be shared across threads.
    """

    def __init__(self, policy: ParsePolicy = ParsePolicy.LENIENT) -> None:
        """
        Args:
            policy: Treatment of missing or malformed counter, period and
                    algorithm values (default :attr:`ParsePolicy.LENIENT`).
        """
        self.policy = policy

    def parse(self, uri: str) -> ParsedURI:
        """
        Parse and validate an ``otpauth://`` URI.

        Args:
            uri: Full otpauth URI string.

        Returns:
            Populated :class:`ParsedURI`.

        Raises:
            uri.errors.URIParseError: The subclass naming the failed step.
            core.utils.InvalidSecretError: If the secret is not valid Base32.
        """
        if not isinstance(uri, str):
            raise InvalidURIError()
        scheme, otp_type, label, items = _split(uri.strip())

        if scheme is None:
            raise MissingSchemeError()
        if scheme != SCHEME:
            raise InvalidSchemeError(f"Expected '{SCHEME}' scheme, got '{scheme}'.")

        if not otp_type:
            raise MissingOTPTypeError()
        try:
            kind_key = KindKey(otp_type)
        except ValueError:
            raise InvalidOTPTypeError(
                f"Unknown OTP type '{otp_type}'. Expected totp or hotp."
            ) from None

        if items is None:
            raise MissingQueryItemsError()

        kind = kind_from(kind_key, items, self.policy)

        encoded_secret = items.get(ItemKey.SECRET.value)
        if not encoded_secret:
            raise MissingSecretError()
        secret = decode_secret(encoded_secret)

        label_issuer, account = extract_label_items(label)
        issuer = label_issuer if label_issuer is not None else items.get(ItemKey.ISSUER.value)

        algorithm = algorithm_for(items.get(ItemKey.ALGORITHM.value), self.policy)
        code_length = code_length_for(items.get(ItemKey.DIGITS.value))

        return ParsedURI(
            issuer=issuer,
            account=account,
            secret=secret,
            code_length=code_length,
            algorithm=algorithm,
            kind=kind,
        )


def parse_otpauth_uri(uri: str, policy: ParsePolicy = ParsePolicy.LENIENT) -> ParsedURI:
    """Shortcut for ``URIParser(policy).parse(uri)``."""
    return URIParser(policy).parse(uri)


# ── Field helpers ─────────────────────────────────────────────────────────────

def kind_from(kind_key: KindKey, items: QueryItems, policy: ParsePolicy) -> Kind:
    """
    Build the OTP kind, reading ``counter`` for HOTP or ``period`` for TOTP.

    Raises:
        MissingCounterError: STRICT policy, counter absent or not a uint64.
        MissingPeriodError:  STRICT policy, period absent or not a number.
        InvalidPeriodError:  STRICT policy, period not positive and finite.
    """
    strict = policy is ParsePolicy.STRICT

    if kind_key is KindKey.HOTP:
        counter = _parse_counter(items.get(ItemKey.COUNTER.value))
        if counter is not None:
            return CounterBased(counter)
        if strict:
            raise MissingCounterError()
        logger.debug("No usable counter in HOTP URI; using %d", DEFAULT_COUNTER_BASED.counter)
        return DEFAULT_COUNTER_BASED

    period = _parse_number(items.get(ItemKey.PERIOD.value))
    if period is None:
        if strict:
            raise MissingPeriodError()
        logger.debug("No usable period in TOTP URI; using %ss", DEFAULT_TIME_BASED.timestep)
        return DEFAULT_TIME_BASED
    if not math.isfinite(period) or period <= 0:
        if strict:
            raise InvalidPeriodError(f"'period' must be a positive number of seconds, got {period}.")
        logger.debug("Period %s out of range; using %ss", period, DEFAULT_TIME_BASED.timestep)
        return DEFAULT_TIME_BASED
    return TimeBased(period)


def extract_label_items(label: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a label of the form ``issuer:account`` into its two parts.

    A single leading slash is ignored. Any label that does not split into
    exactly two parts yields ``(None, None)``.
    """
    if label.startswith("/"):
        label = label[1:]
    parts = label.split(LABEL_SEPARATOR)
    if len(parts) != 2:
        return None, None
    return parts[0], parts[1]


def algorithm_for(value: Optional[str], policy: ParsePolicy = ParsePolicy.LENIENT) -> Algorithm:
    """
    Resolve the ``algorithm`` query item, defaulting to SHA1 when absent.

    Raises:
        InvalidAlgorithmError: STRICT policy and the name is unknown.
    """
    if value is None:
        return DEFAULT_ALGORITHM
    algorithm = Algorithm.from_name(value)
    if algorithm is not None:
        return algorithm
    if policy is ParsePolicy.STRICT:
        raise InvalidAlgorithmError(
            f"Unsupported algorithm '{value}'. Supported: SHA1, SHA256, SHA512."
        )
    logger.warning("Unsupported algorithm %r in otpauth URI; using %s", value, DEFAULT_ALGORITHM.value)
    return DEFAULT_ALGORITHM


def code_length_for(value: Optional[str]) -> CodeLength:
    """
    Resolve the ``digits`` query item, defaulting to 6 when absent or not an integer.

    Raises:
        InvalidCodeLengthError: The integer is not an allowed length.
    """
    digits = _parse_int64(value)
    if digits is None:
        return DEFAULT_CODE_LENGTH
    code_length = CodeLength.from_digits(digits)
    if code_length is None:
        raise InvalidCodeLengthError(
            f"Digits must be one of {', '.join(str(m.value) for m in CodeLength)}, got {digits}."
        )
    return code_length


# ── Internal ──────────────────────────────────────────────────────────────────

def _split(uri: str) -> Tuple[Optional[str], Optional[str], str, Optional[QueryItems]]:
    """
    Return (scheme, host, path, query items), percent-decoded.

    Absent components are None. Any syntax or encoding error raises
    :class:`InvalidURIError` here, before the other steps run.
    """
    if not _URI_CHARS_RE.fullmatch(uri) or _BAD_ESCAPE_RE.search(uri):
        raise InvalidURIError()
    match = _URI_RE.fullmatch(uri)
    if match is None:
        raise InvalidURIError()
    scheme, authority, path, query, _fragment = match.groups()
    if scheme is not None and not _SCHEME_RE.fullmatch(scheme):
        raise InvalidURIError()
    host = _host(authority) if authority is not None else None
    items = _query_items(query) if query is not None else None
    return scheme, host, _decode(path), items


def _host(authority: str) -> str:
    host = authority.rpartition("@")[2]
    return _decode(_PORT_RE.sub("", host))


def _decode(component: str) -> str:
    try:
        return urllib.parse.unquote(component, errors="strict")
    except UnicodeDecodeError:
        raise InvalidURIError("The URI contains an invalid percent-encoded sequence.") from None


def _query_items(query: str) -> QueryItems:
    """Split a query into name -> value; the first occurrence of a name wins."""
    items: QueryItems = {}
    for pair in query.split("&"):
        if not pair:
            continue
        name, sep, value = pair.partition("=")
        items.setdefault(_decode(name), _decode(value) if sep else None)
    return items


def _parse_counter(value: Optional[str]) -> Optional[int]:
    if value is None or not _UNSIGNED_RE.fullmatch(value):
        return None
    # Bounded before int(): UINT64_MAX has 20 digits.
    if len(value.lstrip("0")) > 20:
        return None
    counter = int(value)
    return counter if counter <= UINT64_MAX else None


def _parse_int64(value: Optional[str]) -> Optional[int]:
    if value is None or not _INTEGER_RE.fullmatch(value):
        return None
    if len(value.lstrip("+-").lstrip("0")) > 19:
        return None
    number = int(value)
    return number if INT64_MIN <= number <= INT64_MAX else None


def _parse_number(value: Optional[str]) -> Optional[float]:
    if value is None or not _NUMBER_RE.fullmatch(value):
        return None
    return float(value)
