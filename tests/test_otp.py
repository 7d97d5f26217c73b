"""Tests for core.totp, core.hotp, core.generator and core.utils."""

import time

import pytest

from core.generator import generate_code
from core.hotp import generate_hotp, validate_hotp
from core.metadata import Metadata
from core.otp import Algorithm, CodeLength, CounterBased, TimeBased
from core.totp import generate_totp, remaining_seconds, time_counter, validate_totp
from core.utils import InvalidSecretError, decode_secret, encode_secret, normalize_secret


# ── RFC 4226 Appendix D test vectors ─────────────────────────────────────────
# Secret: "12345678901234567890" (as bytes)
RFC_SECRET = b"12345678901234567890"
RFC_HOTP_EXPECTED = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]


@pytest.mark.parametrize("counter,expected", enumerate(RFC_HOTP_EXPECTED))
def test_hotp_rfc4226_vectors(counter: int, expected: str) -> None:
    code = generate_hotp(RFC_SECRET, counter=counter, length=CodeLength.SIX, algorithm=Algorithm.SHA1)
    assert code == expected, f"HOTP counter={counter}: got {code}, expected {expected}"


# ── RFC 6238 TOTP test vectors ────────────────────────────────────────────────
# Source: RFC 6238, Appendix B
# Secrets vary by algorithm per the RFC

_SHA1_SECRET = b"12345678901234567890"
_SHA256_SECRET = b"12345678901234567890123456789012"
_SHA512_SECRET = b"1234567890123456789012345678901234567890123456789012345678901234"

_TOTP_VECTORS = [
    # (timestamp, algorithm,        secret_bytes,   expected)
    (59,          Algorithm.SHA1,   _SHA1_SECRET,   "94287082"),
    (59,          Algorithm.SHA256, _SHA256_SECRET, "46119246"),
    (59,          Algorithm.SHA512, _SHA512_SECRET, "90693936"),
    (1111111109,  Algorithm.SHA1,   _SHA1_SECRET,   "07081804"),
    (1111111109,  Algorithm.SHA256, _SHA256_SECRET, "68084774"),
    (1111111109,  Algorithm.SHA512, _SHA512_SECRET, "25091201"),
    (1111111111,  Algorithm.SHA1,   _SHA1_SECRET,   "14050471"),
    (1111111111,  Algorithm.SHA256, _SHA256_SECRET, "67062674"),
    (1111111111,  Algorithm.SHA512, _SHA512_SECRET, "99943326"),
    (20000000000, Algorithm.SHA1,   _SHA1_SECRET,   "65353130"),
    (20000000000, Algorithm.SHA256, _SHA256_SECRET, "77737706"),
    (20000000000, Algorithm.SHA512, _SHA512_SECRET, "47863826"),
]


@pytest.mark.parametrize("ts,alg,secret,expected", _TOTP_VECTORS)
def test_totp_rfc6238_vectors(
    ts: int, alg: Algorithm, secret: bytes, expected: str
) -> None:
    code = generate_totp(
        secret,
        length=CodeLength.EIGHT,
        timestep=30,
        algorithm=alg,
        timestamp=float(ts),
    )
    assert code == expected, f"TOTP ts={ts} {alg}: got {code}, expected {expected}"


def test_seven_digit_code_is_last_digits_of_eight() -> None:
    eight = generate_hotp(RFC_SECRET, 0, CodeLength.EIGHT)
    seven = generate_hotp(RFC_SECRET, 0, CodeLength.SEVEN)
    assert len(seven) == 7
    assert eight.endswith(seven)


def test_short_secret_accepted() -> None:
    code = generate_hotp(decode_secret("JBSWY3DPEHPK3PXP"), 0)
    assert len(code) == 6 and code.isdigit()


# ── Time helpers ──────────────────────────────────────────────────────────────

def test_time_counter_fractional_timestep() -> None:
    assert time_counter(59.0, 30) == 1
    assert time_counter(10.0, 2.5) == 4


def test_remaining_seconds_range() -> None:
    rem = remaining_seconds(timestep=30)
    assert 0 < rem <= 30


def test_remaining_seconds_at_boundary() -> None:
    # At exactly t=0 (multiple of 30), remaining should be 30
    assert remaining_seconds(timestep=30, timestamp=0.0) == 30

    # At t=29, remaining should be 1
    assert remaining_seconds(timestep=30, timestamp=29.0) == 1


# ── Validate TOTP ─────────────────────────────────────────────────────────────

def test_validate_totp_current_window() -> None:
    ts = time.time()
    code = generate_totp(RFC_SECRET, timestep=30, timestamp=ts)
    assert validate_totp(code, RFC_SECRET, timestep=30, timestamp=ts)


def test_validate_totp_previous_window() -> None:
    code = generate_totp(RFC_SECRET, timestamp=1000.0)
    assert validate_totp(code, RFC_SECRET, timestamp=1030.0, window=1)
    assert not validate_totp(code, RFC_SECRET, timestamp=1030.0, window=0)


def test_validate_totp_wrong_code() -> None:
    assert not validate_totp("000000", RFC_SECRET, timestep=30, timestamp=0.0)


# ── Validate HOTP ─────────────────────────────────────────────────────────────

def test_validate_hotp_correct() -> None:
    assert validate_hotp("755224", RFC_SECRET, counter=0) == 1


def test_validate_hotp_look_ahead() -> None:
    # Token for counter=5 with counter at 0 → look-ahead to 5
    assert validate_hotp("254676", RFC_SECRET, counter=0, look_ahead=10) == 6


def test_validate_hotp_invalid() -> None:
    assert validate_hotp("000000", RFC_SECRET, counter=0, look_ahead=5) is None


def test_validate_hotp_stops_at_counter_limit() -> None:
    assert validate_hotp("000000", RFC_SECRET, counter=2**64 - 1, look_ahead=5) is None


# ── Generate from metadata ────────────────────────────────────────────────────

def test_generate_code_counter_based() -> None:
    metadata = Metadata(RFC_SECRET, CodeLength.SIX, Algorithm.SHA1, CounterBased(3))
    assert generate_code(metadata) == "969429"


def test_generate_code_time_based() -> None:
    metadata = Metadata(_SHA256_SECRET, CodeLength.EIGHT, Algorithm.SHA256, TimeBased(30))
    assert generate_code(metadata, timestamp=1111111109.0) == "68084774"


def test_generate_code_from_uri() -> None:
    secret = encode_secret(RFC_SECRET)
    metadata = Metadata.from_uri(f"otpauth://hotp/Example:bob?secret={secret}&counter=9")
    assert generate_code(metadata) == "520489"


# ── Utils ─────────────────────────────────────────────────────────────────────

def test_normalize_secret_strips_spaces() -> None:
    assert normalize_secret("JBSW Y3DP") == "JBSWY3DP"  # no padding needed here (len=8)


def test_normalize_secret_adds_padding() -> None:
    assert normalize_secret("jbswy3d") == "JBSWY3D="


def test_decode_secret_roundtrip() -> None:
    raw = b"\x00\x01\x02\x03\x04\x05\x06\x07\x08\x09"
    assert decode_secret(encode_secret(raw)) == raw


@pytest.mark.parametrize("secret", ["!!!NOTBASE32!!!", "", "========", "A", "JB=SWY3DP", "JBSWY3D1"])
def test_decode_secret_invalid_raises(secret: str) -> None:
    with pytest.raises(InvalidSecretError):
        decode_secret(secret)


@pytest.mark.parametrize("secret", ["JBSWY3DPEHPK3PXß", "ıJBSWY3D", "JBSWY3Dﬆ"])
def test_decode_secret_rejects_letters_that_uppercase_to_ascii(secret: str) -> None:
    with pytest.raises(InvalidSecretError):
        decode_secret(secret)
