"""Tests for the require guards."""

import pytest

from eiffel_invariants.errors import ContractViolation, InvariantViolation, Phase, RequirementError
from eiffel_invariants.guards import require, require_or_err


class TestRequire:
    def test_passes_when_condition_holds(self):
        require(True, "never shown")
        require(1, "never shown")

    def test_aborts_when_condition_fails(self):
        with pytest.raises(ContractViolation, match="amount must be positive"):
            require(False, "amount must be positive")

    def test_abort_is_not_an_exception(self):
        assert not issubclass(ContractViolation, Exception)


class TestRequireOrErr:
    def test_passes_when_condition_holds(self):
        require_or_err([1], "never shown")

    def test_raises_recoverable_error(self):
        with pytest.raises(RequirementError, match="empty batch"):
            require_or_err([], "empty batch")
        assert issubclass(RequirementError, Exception)


class TestInvariantViolation:
    def test_message_and_phase(self):
        violation = InvariantViolation("is_valid", "exit")
        assert violation.phase is Phase.EXIT
        assert str(violation) == "Invariant is_valid failed on exit"
        assert isinstance(violation, ContractViolation)

    def test_accepts_phase_member(self):
        assert InvariantViolation("is_valid", Phase.ENTRY).phase is Phase.ENTRY

    def test_unknown_phase_rejected(self):
        with pytest.raises(ValueError):
            InvariantViolation("is_valid", "during")
