"""Tests for timing policies and their keyword vocabulary."""

import pytest
from hypothesis import given, strategies as st

from eiffel_invariants.errors import InvalidTimingKeyword
from eiffel_invariants.timing import TimingPolicy, VALID_KEYWORDS


class TestTimingPolicy:
    def test_canonical_keywords(self):
        """Canonical keywords resolve to their policies."""
        assert TimingPolicy.from_keyword("before") is TimingPolicy.CHECK_BEFORE
        assert TimingPolicy.from_keyword("after") is TimingPolicy.CHECK_AFTER
        assert TimingPolicy.from_keyword("before_and_after") is TimingPolicy.CHECK_BEFORE_AND_AFTER

    @pytest.mark.parametrize("synonym, canonical", [
        ("require", "before"),
        ("ensure", "after"),
        ("require_and_ensure", "before_and_after"),
    ])
    def test_eiffel_synonyms(self, synonym, canonical):
        """The require/ensure vocabulary maps onto the same policies."""
        assert TimingPolicy.from_keyword(synonym) is TimingPolicy.from_keyword(canonical)

    def test_guard_slots(self):
        assert TimingPolicy.CHECK_BEFORE.checks_entry
        assert not TimingPolicy.CHECK_BEFORE.checks_exit
        assert not TimingPolicy.CHECK_AFTER.checks_entry
        assert TimingPolicy.CHECK_AFTER.checks_exit
        assert TimingPolicy.CHECK_BEFORE_AND_AFTER.checks_entry
        assert TimingPolicy.CHECK_BEFORE_AND_AFTER.checks_exit

    def test_valid_keywords_are_canonical_only(self):
        assert VALID_KEYWORDS == ("before", "after", "before_and_after")

    def test_keywords_are_case_sensitive(self):
        with pytest.raises(InvalidTimingKeyword):
            TimingPolicy.from_keyword("Before")

    def test_non_string_keyword_rejected(self):
        with pytest.raises(InvalidTimingKeyword) as exc_info:
            TimingPolicy.from_keyword(3)
        assert exc_info.value.value == 3


class TestTimingKeywordProperties:
    @given(keyword=st.text().filter(
        lambda s: s not in VALID_KEYWORDS + ("require", "ensure", "require_and_ensure")
    ))
    def test_unknown_keywords_rejected(self, keyword):
        """For any unrecognized keyword, resolution fails and names the allowed set."""
        with pytest.raises(InvalidTimingKeyword) as exc_info:
            TimingPolicy.from_keyword(keyword)
        assert exc_info.value.value == keyword
        assert exc_info.value.allowed == VALID_KEYWORDS
