from dataclasses import dataclass
from typing import Tuple

from .timing import TimingPolicy


@dataclass
class Settings:
    suffix: str = "_no_invariant"
    default_timing: TimingPolicy = TimingPolicy.CHECK_BEFORE_AND_AFTER
    marker_names: Tuple[str, ...] = ("check_invariant",)
    violation_module: str = "eiffel_invariants.errors"
    violation_name: str = "InvariantViolation"
    result_name: str = "result"
