"""
The credential descriptor used to generate one-time passwords for an account.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional

from core.otp import Algorithm, CodeLength, Kind
from uri.parser import ParsedURI, ParsePolicy, URIParser


def new_id() -> uuid.UUID:
    """Return a fresh random identifier; safe to call from any thread."""
    return uuid.uuid4()


@dataclass(frozen=True)
class Metadata:
    """
    Everything needed to generate codes for one account.

    Equality and hashing consider the six content fields only; ``id`` is a
    synthetic key for collections and differs between otherwise equal
    instances.
    """

    secret: bytes = field(repr=False)
    code_length: CodeLength
    algorithm: Algorithm
    kind: Kind
    issuer: Optional[str] = None
    account: Optional[str] = None
    id: uuid.UUID = field(default_factory=new_id, compare=False)

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("Secret must not be empty.")

    @classmethod
    def from_parsed(cls, parsed: ParsedURI) -> "Metadata":
        return cls(
            secret=parsed.secret,
            code_length=parsed.code_length,
            algorithm=parsed.algorithm,
            kind=parsed.kind,
            issuer=parsed.issuer,
            account=parsed.account,
        )

    @classmethod
    def from_uri(cls, uri: str, policy: ParsePolicy = ParsePolicy.LENIENT) -> "Metadata":
        """
        Build a :class:`Metadata` from an ``otpauth://`` URI.

        Args:
            uri:    Full otpauth URI string.
            policy: Parser strictness, see :class:`uri.parser.ParsePolicy`.

        Raises:
            uri.errors.URIParseError: Propagated unchanged from the parser.
            core.utils.InvalidSecretError: If the secret is not valid Base32.
        """
        return cls.from_parsed(URIParser(policy).parse(uri))
