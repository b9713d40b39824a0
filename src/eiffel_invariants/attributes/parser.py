"""
Parsing of ``check_invariant`` decorator arguments.

Grammar of the argument list::

    <invariant_identifier>
    <invariant_identifier>, "before" | "after" | "before_and_after"
    <invariant_identifier>, check_time="before" | "after" | "before_and_after"

Arguments after the identifier that are neither literals nor timing keywords
are ignored so that future options do not break older transformers.
"""

import ast
from keyword import iskeyword
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from ..errors import MalformedAttribute
from ..logging import get_logger
from ..timing import TimingPolicy
from .model import AttributeSpec, AttributeToken, TokenKind

logger = get_logger(__name__)

TIMING_KEYWORD_NAMES = ("check_time", "timing")

# Same value types an ast.Constant can hold
_LITERAL_TYPES = (str, bytes, int, float, complex, bool, type(None), type(Ellipsis))


def _is_identifier(name: Any) -> bool:
    return isinstance(name, str) and name.isidentifier() and not iskeyword(name)


def _token_from_node(node: ast.expr, keyword: Optional[str] = None) -> AttributeToken:
    if isinstance(node, ast.Name):
        return AttributeToken(TokenKind.IDENTIFIER, node.id, keyword)
    if isinstance(node, ast.Constant):
        return AttributeToken(TokenKind.LITERAL, node.value, keyword)
    return AttributeToken(TokenKind.OTHER, node, keyword)


def tokens_from_call(call: ast.Call) -> List[AttributeToken]:
    """Tokenize the arguments of a decorator call found in source."""
    tokens = [_token_from_node(arg) for arg in call.args]
    for kw in call.keywords:
        if kw.arg is None:
            # **mapping unpacking carries nothing we can read statically
            tokens.append(AttributeToken(TokenKind.OTHER, kw.value))
        else:
            tokens.append(_token_from_node(kw.value, kw.arg))
    return tokens


def _value_token(value: Any, keyword: Optional[str] = None) -> AttributeToken:
    if isinstance(value, _LITERAL_TYPES):
        return AttributeToken(TokenKind.LITERAL, value, keyword)
    return AttributeToken(TokenKind.OTHER, value, keyword)


def _leading_token(value: Any) -> AttributeToken:
    if _is_identifier(value):
        return AttributeToken.identifier(value)
    if isinstance(value, (classmethod, staticmethod)):
        value = value.__func__
    elif isinstance(value, property) and value.fget is not None:
        value = value.fget
    name = getattr(value, "__name__", None)
    if callable(value) and _is_identifier(name):
        return AttributeToken.identifier(name)
    return _value_token(value)


def tokens_from_values(args: Sequence[Any], kwargs: Optional[Mapping[str, Any]] = None) -> List[AttributeToken]:
    """
    Tokenize the arguments of a live ``check_invariant(...)`` call.

    The leading argument may be the predicate function itself or its name.
    """
    tokens = []
    for index, value in enumerate(args):
        tokens.append(_leading_token(value) if index == 0 else _value_token(value))
    for name, value in (kwargs or {}).items():
        tokens.append(_value_token(value, name))
    return tokens


def tokenize_attribute(text: str) -> List[AttributeToken]:
    """Tokenize a textual argument list such as ``my_invariant, "before"``."""
    try:
        tree = ast.parse(f"_({text})", mode="eval")
    except SyntaxError as exc:
        raise MalformedAttribute(f"Cannot parse invariant arguments {text!r}: {exc.msg}") from exc
    return tokens_from_call(tree.body)


def parse_attribute(
    tokens: Iterable[AttributeToken],
    default_timing: TimingPolicy = TimingPolicy.CHECK_BEFORE_AND_AFTER,
) -> AttributeSpec:
    """
    Build an AttributeSpec from decorator argument tokens.

    Args:
        tokens: Decorator arguments in source order
        default_timing: Policy used when no timing keyword is supplied

    Returns:
        Parsed AttributeSpec

    Raises:
        MalformedAttribute: If the invariant name is missing or not an identifier
        InvalidTimingKeyword: If a timing literal is not a recognized keyword
    """
    tokens = list(tokens)
    if not tokens:
        raise MalformedAttribute("Expected the name of the invariant method as the first argument")

    first = tokens[0]
    if first.kind is not TokenKind.IDENTIFIER or first.keyword is not None or not _is_identifier(first.value):
        shown = first.value if first.kind is not TokenKind.OTHER else type(first.value).__name__
        raise MalformedAttribute(
            f"Expected the name of the invariant method as the first argument, got {shown!r}"
        )

    timing = None
    for token in tokens[1:]:
        if token.keyword in TIMING_KEYWORD_NAMES:
            if token.kind is not TokenKind.LITERAL:
                raise MalformedAttribute(f"Expected a string literal for the {token.keyword} argument")
            timing = TimingPolicy.from_keyword(token.value)
        elif token.keyword is None and token.kind is TokenKind.LITERAL:
            timing = TimingPolicy.from_keyword(token.value)
        else:
            logger.debug(f"Ignoring invariant argument {token.keyword or token.value!r}")

    return AttributeSpec(invariant_name=first.value, timing=timing or default_timing)
