"""
Closed-set decoding for enum tokens arriving from the wire.

Filters and write requests carry enum members as plain strings. Decoding
returns a tagged result instead of raising, so callers decide how a bad
token is reported (usually as a ``ValidationError`` naming the field and
the allowed values).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Type, TypeVar, Union

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class Decoded(Generic[E]):
    """A token that matched a member of the closed set."""

    value: E


@dataclass(frozen=True)
class DecodeFailure:
    """A token outside the closed set."""

    token: str
    allowed: tuple[str, ...]


DecodeResult = Union[Decoded[E], DecodeFailure]


def allowed_tokens(enum_cls: Type[Enum]) -> tuple[str, ...]:
    """Canonical tokens of ``enum_cls`` in declaration order."""
    return tuple(str(member.value) for member in enum_cls)


def decode_enum(enum_cls: Type[E], token: str) -> DecodeResult[E]:
    """
    Decode ``token`` into a member of ``enum_cls``, ignoring case.

    Both the canonical value (``"OnHold"``) and the member name
    (``"ON_HOLD"``) are accepted.

    Parameters
    ----------
    enum_cls : Type[E]
        The closed set to decode into.
    token : str
        Raw token from a query string or request body.

    Returns
    -------
    DecodeResult[E]
        ``Decoded`` with the member, or ``DecodeFailure`` carrying the
        allowed tokens.

    Examples
    --------
    >>> decode_enum(MediaType, "series")
    Decoded(value=<MediaType.SERIES: 'Series'>)
    >>> decode_enum(MediaType, "book").allowed
    ('Movie', 'Series')
    """
    wanted = token.strip().casefold()
    for member in enum_cls:
        if wanted in (str(member.value).casefold(), member.name.casefold()):
            return Decoded(member)
    return DecodeFailure(token=token, allowed=allowed_tokens(enum_cls))
