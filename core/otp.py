"""
Value types describing how a one-time password is generated.

These are the building blocks of :class:`core.metadata.Metadata`: the hash
algorithm, the number of digits and the kind of OTP (counter or time based).
"""

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union

UINT64_MAX = 2**64 - 1


class Algorithm(str, Enum):
    """Supported HMAC algorithms."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @classmethod
    def from_name(cls, value: str) -> Optional["Algorithm"]:
        """
        Look up an algorithm by name, ignoring case and dashes.

        Returns:
            The matching member, or None if the name is unknown.
        """
        key = value.strip().upper().replace("-", "")
        try:
            return cls(key)
        except ValueError:
            return None


class CodeLength(IntEnum):
    """Number of digits in a generated code."""

    SIX = 6
    SEVEN = 7
    EIGHT = 8

    @classmethod
    def from_digits(cls, digits: int) -> Optional["CodeLength"]:
        """
        Look up a length by its number of digits.

        Returns:
            The matching member, or None if ``digits`` is not an allowed length.
        """
        try:
            return cls(digits)
        except ValueError:
            return None


class KindKey(str, Enum):
    """The OTP type as written in the host of an otpauth URI."""

    HOTP = "hotp"
    TOTP = "totp"


@dataclass(frozen=True)
class CounterBased:
    """HOTP: codes depend on a moving counter."""

    counter: int

    def __post_init__(self) -> None:
        if not 0 <= self.counter <= UINT64_MAX:
            raise ValueError("Counter must fit in an unsigned 64-bit integer.")


@dataclass(frozen=True)
class TimeBased:
    """TOTP: codes depend on the current time divided into time-steps."""

    timestep: float     # seconds

    def __post_init__(self) -> None:
        if not math.isfinite(self.timestep) or self.timestep <= 0:
            raise ValueError("Time-step must be a positive number of seconds.")


Kind = Union[CounterBased, TimeBased]


# ── Defaults ──────────────────────────────────────────────────────────────────

DEFAULT_ALGORITHM = Algorithm.SHA1
DEFAULT_CODE_LENGTH = CodeLength.SIX
DEFAULT_COUNTER = 0
DEFAULT_TIMESTEP = 30.0

DEFAULT_COUNTER_BASED = CounterBased(DEFAULT_COUNTER)
DEFAULT_TIME_BASED = TimeBased(DEFAULT_TIMESTEP)
