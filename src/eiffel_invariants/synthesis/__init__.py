"""Synthesis of guarded method pairs."""

from .model import TransformationResult
from .synthesizer import build_arguments, renamed_name, synthesize

__all__ = [
    "TransformationResult",
    "build_arguments",
    "renamed_name",
    "synthesize",
]
