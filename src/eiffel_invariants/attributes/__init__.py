"""Decorator argument parsing for invariant injection."""

from .model import AttributeSpec, AttributeToken, TokenKind
from .parser import parse_attribute, tokenize_attribute, tokens_from_call, tokens_from_values

__all__ = [
    "AttributeSpec",
    "AttributeToken",
    "TokenKind",
    "parse_attribute",
    "tokenize_attribute",
    "tokens_from_call",
    "tokens_from_values",
]
