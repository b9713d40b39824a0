"""Eiffel-style invariant checks for Python methods."""

from .attributes import AttributeSpec, parse_attribute
from .config import Settings
from .decorators import check_invariant
from .errors import (
    ContractViolation,
    InvalidTimingKeyword,
    InvariantViolation,
    MalformedAttribute,
    MissingReceiver,
    Phase,
    RequirementError,
    TransformError,
    UnsupportedDeclaration,
)
from .guards import require, require_or_err
from .rewrite import RewriteResult, transform_source
from .signature import MethodSignature, extract_signature
from .synthesis import TransformationResult, synthesize
from .timing import TimingPolicy

__all__ = [
    "AttributeSpec",
    "ContractViolation",
    "InvalidTimingKeyword",
    "InvariantViolation",
    "MalformedAttribute",
    "MethodSignature",
    "MissingReceiver",
    "Phase",
    "RequirementError",
    "RewriteResult",
    "Settings",
    "TimingPolicy",
    "TransformError",
    "TransformationResult",
    "UnsupportedDeclaration",
    "check_invariant",
    "extract_signature",
    "parse_attribute",
    "require",
    "require_or_err",
    "synthesize",
    "transform_source",
]
