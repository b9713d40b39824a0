"""
Models for decorator arguments.

A decorator argument list is reduced to a flat sequence of tokens so that the
same parser serves source rewriting (``ast`` nodes) and runtime decoration
(live Python values).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..timing import TimingPolicy


class TokenKind(Enum):
    """Enumeration of argument shapes the parser distinguishes."""
    IDENTIFIER = "identifier"
    LITERAL = "literal"
    OTHER = "other"


@dataclass(frozen=True)
class AttributeToken:
    """Single decorator argument."""
    kind: TokenKind
    value: Any                      # Identifier text, literal value or the raw expression
    keyword: Optional[str] = None   # Keyword name for ``name=value`` arguments

    @classmethod
    def identifier(cls, name: str) -> "AttributeToken":
        return cls(TokenKind.IDENTIFIER, name)

    @classmethod
    def literal(cls, value: Any, keyword: Optional[str] = None) -> "AttributeToken":
        return cls(TokenKind.LITERAL, value, keyword)


@dataclass(frozen=True)
class AttributeSpec:
    """Parsed configuration of one annotated method."""
    invariant_name: str
    timing: TimingPolicy = TimingPolicy.CHECK_BEFORE_AND_AFTER
