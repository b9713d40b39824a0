"""Tests for decorator argument parsing."""

import ast
from keyword import iskeyword

import pytest
from hypothesis import given, strategies as st

from eiffel_invariants.attributes import (
    AttributeSpec,
    AttributeToken,
    TokenKind,
    parse_attribute,
    tokenize_attribute,
    tokens_from_call,
    tokens_from_values,
)
from eiffel_invariants.errors import InvalidTimingKeyword, MalformedAttribute
from eiffel_invariants.timing import TimingPolicy


def parse_text(text: str, **kwargs) -> AttributeSpec:
    return parse_attribute(tokenize_attribute(text), **kwargs)


class TestParseAttribute:
    def test_identifier_only_defaults_to_both(self):
        spec = parse_text("my_invariant")
        assert spec == AttributeSpec("my_invariant", TimingPolicy.CHECK_BEFORE_AND_AFTER)

    @pytest.mark.parametrize("text, timing", [
        ('my_invariant, "before"', TimingPolicy.CHECK_BEFORE),
        ('my_invariant, "after"', TimingPolicy.CHECK_AFTER),
        ('my_invariant, "before_and_after"', TimingPolicy.CHECK_BEFORE_AND_AFTER),
        ('my_invariant, "require"', TimingPolicy.CHECK_BEFORE),
        ('my_invariant, "ensure"', TimingPolicy.CHECK_AFTER),
        ('my_invariant, "require_and_ensure"', TimingPolicy.CHECK_BEFORE_AND_AFTER),
        ('my_invariant, check_time="after"', TimingPolicy.CHECK_AFTER),
        ('my_invariant, timing="before"', TimingPolicy.CHECK_BEFORE),
    ])
    def test_timing_keywords(self, text, timing):
        spec = parse_text(text)
        assert spec.invariant_name == "my_invariant"
        assert spec.timing is timing

    def test_invalid_timing_names_value_and_choices(self):
        """A literal outside the vocabulary fails with the value and the three choices."""
        with pytest.raises(InvalidTimingKeyword) as exc_info:
            parse_text('my_invariant, "sometimes"')

        message = str(exc_info.value)
        assert exc_info.value.value == "sometimes"
        assert '"sometimes"' in message
        assert '"before", "after", "before_and_after"' in message

    def test_numeric_literal_is_invalid_timing(self):
        with pytest.raises(InvalidTimingKeyword):
            parse_text("my_invariant, 42")

    def test_last_timing_wins(self):
        assert parse_text('inv, "before", "after"').timing is TimingPolicy.CHECK_AFTER

    def test_non_literal_arguments_ignored(self):
        """Expressions that are neither literals nor identifiers are skipped."""
        spec = parse_text("inv, some.attribute, other(), [1, 2]")
        assert spec.timing is TimingPolicy.CHECK_BEFORE_AND_AFTER

    def test_unknown_keyword_arguments_ignored(self):
        spec = parse_text('inv, "after", message="anything"')
        assert spec.timing is TimingPolicy.CHECK_AFTER

    def test_non_literal_check_time_rejected(self):
        with pytest.raises(MalformedAttribute):
            parse_text("inv, check_time=BEFORE")

    def test_custom_default_timing(self):
        spec = parse_text("inv", default_timing=TimingPolicy.CHECK_AFTER)
        assert spec.timing is TimingPolicy.CHECK_AFTER

    @pytest.mark.parametrize("text", [
        "",
        '"my_invariant"',
        "self.my_invariant",
        "invariant=my_invariant",
        "42",
    ])
    def test_missing_or_non_identifier_name(self, text):
        with pytest.raises(MalformedAttribute):
            parse_text(text)

    def test_unparsable_text(self):
        with pytest.raises(MalformedAttribute):
            tokenize_attribute("my_invariant, (")

    def test_empty_token_list(self):
        with pytest.raises(MalformedAttribute):
            parse_attribute([])


class TestTokenProducers:
    def test_tokens_from_call(self):
        call = ast.parse('check_invariant(inv, "after", x.y, check_time="before")', mode="eval").body
        tokens = tokens_from_call(call)

        assert [token.kind for token in tokens] == [
            TokenKind.IDENTIFIER, TokenKind.LITERAL, TokenKind.OTHER, TokenKind.LITERAL,
        ]
        assert tokens[0].value == "inv"
        assert tokens[1].value == "after"
        assert tokens[3].keyword == "check_time"

    def test_tokens_from_values_with_function(self):
        def is_valid(self):
            return True

        tokens = tokens_from_values((is_valid, "before"), {"check_time": "after"})
        assert tokens == [
            AttributeToken.identifier("is_valid"),
            AttributeToken.literal("before"),
            AttributeToken.literal("after", "check_time"),
        ]

    def test_tokens_from_values_with_name(self):
        tokens = tokens_from_values(("is_valid",))
        assert tokens == [AttributeToken.identifier("is_valid")]

    def test_tokens_from_values_unwraps_descriptors(self):
        def bounded(cls):
            return True

        def size(self):
            return 0

        assert tokens_from_values((classmethod(bounded),))[0] == AttributeToken.identifier("bounded")
        assert tokens_from_values((property(size),))[0] == AttributeToken.identifier("size")

    def test_tokens_from_values_other_objects(self):
        tokens = tokens_from_values(("inv", object()))
        assert tokens[1].kind is TokenKind.OTHER
        assert parse_attribute(tokens).timing is TimingPolicy.CHECK_BEFORE_AND_AFTER

    @pytest.mark.parametrize("text, value", [("None", None), ("True", True), ("...", ...)])
    def test_constants_are_literals_in_both_forms(self, text, value):
        """Values that are ast.Constant in source are literals at runtime too."""
        source_tokens = tokenize_attribute(f"inv, {text}")
        runtime_tokens = tokens_from_values(("inv", value))

        assert source_tokens[1].kind is TokenKind.LITERAL
        assert runtime_tokens[1].kind is TokenKind.LITERAL
        for tokens in (source_tokens, runtime_tokens):
            with pytest.raises(InvalidTimingKeyword):
                parse_attribute(tokens)

    def test_lambda_is_not_an_identifier(self):
        with pytest.raises(MalformedAttribute):
            parse_attribute(tokens_from_values((lambda self: True,)))


identifiers = st.from_regex(r"[a-z_][a-z0-9_]{0,20}", fullmatch=True).filter(lambda s: not iskeyword(s))


class TestAttributeProperties:
    @given(name=identifiers, timing=st.sampled_from(list(TimingPolicy)))
    def test_any_identifier_with_any_timing(self, name, timing):
        """For any identifier and canonical keyword, parsing recovers both."""
        spec = parse_text(f'{name}, "{timing.value}"')
        assert spec == AttributeSpec(name, timing)

    @given(name=identifiers)
    def test_source_and_runtime_tokens_agree(self, name):
        """Source text and live values produce the same specification."""
        assert parse_text(f'{name}, "after"') == parse_attribute(tokens_from_values((name, "after")))
