"""
Source-level invariant injection.

Rewrites a Python module so that every method decorated with
``@check_invariant(...)`` is replaced by the synthesized pair of methods. The
rewritten module no longer depends on the runtime decorator for those methods;
it only needs the violation type, whose import is added when missing.
"""

import ast
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Set

from .attributes import parse_attribute, tokens_from_call
from .config import Settings
from .errors import MalformedAttribute, MissingReceiver, UnsupportedDeclaration
from .logging import get_logger
from .signature import extract_signature, find_decorator
from .synthesis import renamed_name, synthesize

logger = get_logger(__name__)


def _defined_names(stmts: List[ast.stmt]) -> Set[str]:
    names = set()
    for stmt in stmts:
        if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(stmt.name)
        elif isinstance(stmt, ast.If):
            names |= _defined_names(stmt.body) | _defined_names(stmt.orelse)
        elif isinstance(stmt, ast.Try):
            names |= _defined_names(stmt.body) | _defined_names(stmt.orelse) | _defined_names(stmt.finalbody)
            for handler in stmt.handlers:
                names |= _defined_names(handler.body)
    return names


@dataclass(frozen=True)
class TransformationRecord:
    """One method rewritten in a module."""
    class_name: str         # Qualified name of the enclosing class
    method: str             # Name of the wrapper (the original name)
    renamed: str            # Name the original body is kept under
    invariant: str          # Invariant predicate name
    timing: str             # Resolved timing keyword
    line: int               # Line of the original declaration

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RewriteResult:
    """Rewritten module source and what was changed."""
    source: str
    records: List[TransformationRecord] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.records)


class InvariantRewriter(ast.NodeTransformer):
    """Replace decorated methods with their guarded pairs."""

    def __init__(self, settings: Optional[Settings] = None, filename: str = "<unknown>") -> None:
        self.settings = settings or Settings()
        self.filename = filename
        self.records: List[TransformationRecord] = []
        self._class_stack: List[str] = []

    def _markers(self, node: ast.AST) -> List[ast.expr]:
        if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            return []
        return find_decorator(node, self.settings.marker_names)

    def _where(self, node: ast.AST) -> str:
        return f"{self.filename}:{getattr(node, 'lineno', '?')}"

    def visit_ClassDef(self, node: ast.ClassDef) -> ast.ClassDef:
        self._class_stack.append(node.name)
        try:
            node.body = self._rewrite_block(node.body, _defined_names(node.body))
            node.decorator_list = [self.visit(d) for d in node.decorator_list]
        finally:
            self._class_stack.pop()
        return node

    def _rewrite_block(self, stmts: List[ast.stmt], defined: Set[str]) -> List[ast.stmt]:
        """Rewrite the statements of a class body, including its conditional blocks."""
        body: List[ast.stmt] = []
        for stmt in stmts:
            if isinstance(stmt, ast.If):
                stmt.test = self.visit(stmt.test)
                # Only one branch runs, so each may define the same pair
                alternative = set(defined)
                stmt.body = self._rewrite_block(stmt.body, defined)
                stmt.orelse = self._rewrite_block(stmt.orelse, alternative)
                defined |= alternative
                body.append(stmt)
                continue
            if isinstance(stmt, ast.Try):
                stmt.body = self._rewrite_block(stmt.body, defined)
                for handler in stmt.handlers:
                    if handler.type is not None:
                        handler.type = self.visit(handler.type)
                    handler.body = self._rewrite_block(handler.body, defined)
                stmt.orelse = self._rewrite_block(stmt.orelse, defined)
                stmt.finalbody = self._rewrite_block(stmt.finalbody, defined)
                body.append(stmt)
                continue

            markers = self._markers(stmt)
            if not markers:
                body.append(self.visit(stmt))
                continue
            # nested scopes inside the method are rewritten first
            self.generic_visit(stmt)
            body.extend(self._transform_method(stmt, markers, defined))
        return body

    def visit_FunctionDef(self, node: ast.FunctionDef) -> ast.AST:
        if self._markers(node):
            # Only reached for functions that are not directly in a class body
            extract_signature(node, in_class=False)
        return self.generic_visit(node)

    visit_AsyncFunctionDef = visit_FunctionDef

    def _transform_method(self, node, markers: List[ast.expr], defined: Set[str]) -> List[ast.stmt]:
        if len(markers) > 1:
            raise UnsupportedDeclaration(
                f"{self._where(node)}: {node.name!r} has {len(markers)} check_invariant decorators; only one is supported"
            )
        marker = markers[0]
        if not isinstance(marker, ast.Call):
            raise MalformedAttribute(
                f"{self._where(node)}: check_invariant on {node.name!r} needs the invariant method name as an argument"
            )
        if node.decorator_list[0] is not marker:
            # The runtime decorator cannot install itself from under another decorator
            raise UnsupportedDeclaration(
                f"{self._where(node)}: check_invariant must be the outermost decorator of {node.name!r}"
            )

        try:
            spec = parse_attribute(tokens_from_call(marker), default_timing=self.settings.default_timing)
            signature = extract_signature(node, in_class=True)
        except (MalformedAttribute, MissingReceiver, UnsupportedDeclaration) as exc:
            raise type(exc)(f"{self._where(node)}: {exc}") from exc

        target = renamed_name(node.name, self.settings)
        if target in defined:
            raise UnsupportedDeclaration(
                f"{self._where(node)}: {'.'.join(self._class_stack)} already defines {target!r}"
            )
        defined.add(target)

        decorators = [d for d in node.decorator_list if d is not marker]
        result = synthesize(spec, signature, node.body, self.settings, decorators=decorators)
        for new_node in result.nodes():
            ast.copy_location(new_node, node)

        self.records.append(TransformationRecord(
            class_name=".".join(self._class_stack),
            method=node.name,
            renamed=target,
            invariant=spec.invariant_name,
            timing=spec.timing.value,
            line=node.lineno,
        ))
        logger.debug(f"{self._where(node)}: guarded {node.name} with {spec.invariant_name} ({spec.timing.value})")
        return list(result.nodes())


def _imports_violation(tree: ast.Module, settings: Settings) -> bool:
    for stmt in tree.body:
        if isinstance(stmt, ast.ImportFrom):
            for alias in stmt.names:
                if (alias.asname or alias.name) == settings.violation_name:
                    return True
    return False


def _insert_violation_import(tree: ast.Module, settings: Settings) -> None:
    index = 0
    body = tree.body
    if body and isinstance(body[0], ast.Expr) and isinstance(body[0].value, ast.Constant) \
            and isinstance(body[0].value.value, str):
        index = 1
    while index < len(body) and isinstance(body[index], ast.ImportFrom) and body[index].module == "__future__":
        index += 1

    import_node = ast.ImportFrom(
        module=settings.violation_module,
        names=[ast.alias(name=settings.violation_name)],
        level=0,
    )
    body.insert(index, import_node)


def transform_source(source: str, filename: str = "<unknown>", settings: Optional[Settings] = None) -> RewriteResult:
    """
    Rewrite every ``check_invariant``-decorated method in ``source``.

    Args:
        source: Python module source text
        filename: Name used in error messages and for parsing
        settings: Naming settings, defaults to ``Settings()``

    Returns:
        RewriteResult with the new source and one record per rewritten method

    Raises:
        SyntaxError: If ``source`` is not valid Python
        TransformError: If a decorated method cannot be rewritten
    """
    settings = settings or Settings()
    tree = ast.parse(source, filename=filename)

    rewriter = InvariantRewriter(settings, filename)
    tree = rewriter.visit(tree)

    if not rewriter.records:
        logger.debug(f"{filename}: nothing to rewrite")
        return RewriteResult(source=source)

    if not _imports_violation(tree, settings):
        _insert_violation_import(tree, settings)
    ast.fix_missing_locations(tree)

    logger.info(f"{filename}: guarded {len(rewriter.records)} method(s)")
    return RewriteResult(source=ast.unparse(tree) + "\n", records=rewriter.records)
