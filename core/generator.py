"""
Generate codes from a :class:`core.metadata.Metadata`.
"""

from typing import Optional

from core.hotp import generate_hotp
from core.metadata import Metadata
from core.otp import CounterBased
from core.totp import generate_totp


def generate_code(metadata: Metadata, timestamp: Optional[float] = None) -> str:
    """
    Generate the current code for ``metadata``.

    Counter-based metadata uses its stored counter; time-based metadata uses
    ``timestamp`` (default: now) divided into the metadata's time-steps.
    """
    kind = metadata.kind
    if isinstance(kind, CounterBased):
        return generate_hotp(metadata.secret, kind.counter, metadata.code_length, metadata.algorithm)
    return generate_totp(
        metadata.secret,
        length=metadata.code_length,
        timestep=kind.timestep,
        algorithm=metadata.algorithm,
        timestamp=timestamp,
    )
