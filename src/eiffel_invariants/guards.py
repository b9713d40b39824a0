"""
Assertion primitives in the Eiffel style.

``require`` aborts the call with a ContractViolation, which ordinary
``except Exception`` handlers do not catch. ``require_or_err`` raises the
recoverable RequirementError for code paths that propagate errors instead.
"""

from .errors import ContractViolation, RequirementError


def require(condition: object, message: str) -> None:
    """Abort with ``message`` unless ``condition`` holds."""
    if not condition:
        raise ContractViolation(message)


def require_or_err(condition: object, message: str) -> None:
    """Raise RequirementError(``message``) unless ``condition`` holds."""
    if not condition:
        raise RequirementError(message)
