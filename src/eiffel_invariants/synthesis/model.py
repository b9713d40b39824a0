"""Result model for method synthesis."""

import ast
from dataclasses import dataclass
from typing import Tuple, Union

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


@dataclass(frozen=True)
class TransformationResult:
    """
    Pair of methods produced for one annotated declaration.

    Both must be installed side by side on the same class: the wrapper under
    the original name, the renamed original as the method it delegates to.
    """
    renamed_original: FunctionNode
    wrapper: FunctionNode

    def nodes(self) -> Tuple[FunctionNode, FunctionNode]:
        """Return the methods in the order they are emitted."""
        return (self.renamed_original, self.wrapper)

    def dump(self) -> Tuple[str, str]:
        """Structural form of both methods, for comparisons."""
        return tuple(ast.dump(node) for node in self.nodes())

    def to_source(self) -> str:
        return "\n\n".join(ast.unparse(node) for node in self.nodes())
