"""
Signature models for annotated methods.

A MethodSignature captures everything the synthesizer needs to reproduce a
method's calling convention: the receiver, the ordered parameters and the
return annotation. Source-derived signatures also keep the original ``ast``
nodes so the wrapper can be emitted with the exact same parameter list.
"""

import ast
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ParameterKind(Enum):
    """Enumeration of Python parameter binding forms."""
    POSITIONAL_ONLY = "positional_only"
    POSITIONAL_OR_KEYWORD = "positional_or_keyword"
    VAR_POSITIONAL = "var_positional"
    KEYWORD_ONLY = "keyword_only"
    VAR_KEYWORD = "var_keyword"


class Binding(Enum):
    """What the receiver refers to."""
    INSTANCE = "instance"
    CLASS = "class"


@dataclass(frozen=True)
class Parameter:
    """Single non-receiver parameter."""
    name: str
    kind: ParameterKind = ParameterKind.POSITIONAL_OR_KEYWORD
    annotation: Optional[str] = None    # Annotation source text
    default: Optional[str] = None       # Default value source text

    @property
    def is_positional(self) -> bool:
        return self.kind in (ParameterKind.POSITIONAL_ONLY, ParameterKind.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class MethodSignature:
    """Structural description of an instance or class method."""
    name: str
    receiver: str
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[str] = None
    is_async: bool = False
    is_generator: bool = False
    binding: Binding = Binding.INSTANCE
    arguments: Optional[ast.arguments] = field(default=None, compare=False, repr=False)
    returns: Optional[ast.expr] = field(default=None, compare=False, repr=False)
    type_params: Tuple[ast.AST, ...] = field(default=(), compare=False, repr=False)

    @property
    def has_receiver(self) -> bool:
        return bool(self.receiver)

    @property
    def returns_value(self) -> bool:
        """
        Check whether the wrapper has to hand back the call result.

        An unannotated method may still return something, so only an explicit
        ``-> None`` means the call produces no value.
        """
        return self.return_type != "None"

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(parameter.name for parameter in self.parameters)
