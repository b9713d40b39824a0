"""Method signature extraction."""

from .model import Binding, MethodSignature, Parameter, ParameterKind
from .extractor import extract_signature, find_decorator, signature_of

__all__ = [
    "Binding",
    "MethodSignature",
    "Parameter",
    "ParameterKind",
    "extract_signature",
    "find_decorator",
    "signature_of",
]
