"""
Error taxonomy for invariant injection.

Generation-time problems (bad decorator arguments, methods that cannot be
wrapped) derive from ``TransformError`` and are ordinary exceptions. Contract
failures at call time derive from ``ContractViolation``, which sits directly
under ``BaseException`` so that ``except Exception`` handlers never swallow
them.
"""

from enum import Enum
from typing import Iterable, Tuple


class TransformError(Exception):
    """Raised when a method cannot be transformed."""


class MalformedAttribute(TransformError):
    """Raised when the invariant name is missing or is not an identifier."""


class InvalidTimingKeyword(TransformError):
    """Raised when a timing literal is not one of the recognized keywords."""

    def __init__(self, value: object, allowed: Iterable[str]) -> None:
        self.value = value
        self.allowed: Tuple[str, ...] = tuple(allowed)
        expected = ", ".join(f'"{keyword}"' for keyword in self.allowed)
        shown = f'"{value}"' if isinstance(value, str) else repr(value)
        super().__init__(f"Invalid check time: {shown}, expected one of: {expected}")


class MissingReceiver(TransformError):
    """Raised when the annotated callable is not an instance or class method."""


class UnsupportedDeclaration(TransformError):
    """Raised for declarations whose calls cannot be forwarded faithfully."""


class Phase(Enum):
    """Point of the call at which an invariant was evaluated."""
    ENTRY = "entry"
    EXIT = "exit"


class ContractViolation(BaseException):
    """Unrecoverable contract failure. Aborts the current call stack."""


class InvariantViolation(ContractViolation):
    """Raised by generated wrappers when the invariant predicate returns False."""

    def __init__(self, invariant_name: str, phase: "Phase | str") -> None:
        self.invariant_name = invariant_name
        self.phase = Phase(phase)
        super().__init__(f"Invariant {invariant_name} failed on {self.phase.value}")

    def __reduce__(self):
        return (type(self), (self.invariant_name, self.phase.value))


class RequirementError(Exception):
    """Recoverable failure produced by ``require_or_err``."""
