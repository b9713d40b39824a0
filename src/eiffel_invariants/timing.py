"""When an invariant is evaluated around a wrapped call."""

from enum import Enum

from .errors import InvalidTimingKeyword


class TimingPolicy(Enum):
    """Enumeration of guard placements."""
    CHECK_BEFORE = "before"
    CHECK_AFTER = "after"
    CHECK_BEFORE_AND_AFTER = "before_and_after"

    @property
    def checks_entry(self) -> bool:
        return self is not TimingPolicy.CHECK_AFTER

    @property
    def checks_exit(self) -> bool:
        return self is not TimingPolicy.CHECK_BEFORE

    @classmethod
    def from_keyword(cls, keyword: object) -> "TimingPolicy":
        """Resolve a canonical keyword or one of its synonyms."""
        if isinstance(keyword, str) and keyword in _KEYWORDS:
            return _KEYWORDS[keyword]
        raise InvalidTimingKeyword(keyword, VALID_KEYWORDS)


VALID_KEYWORDS = tuple(policy.value for policy in TimingPolicy)

# Eiffel vocabulary: "require" is a precondition, "ensure" a postcondition.
_SYNONYMS = {
    "require": TimingPolicy.CHECK_BEFORE,
    "ensure": TimingPolicy.CHECK_AFTER,
    "require_and_ensure": TimingPolicy.CHECK_BEFORE_AND_AFTER,
}

_KEYWORDS = {policy.value: policy for policy in TimingPolicy}
_KEYWORDS.update(_SYNONYMS)
