"""Extraction of MethodSignature from source declarations and live functions."""

from __future__ import annotations

import ast
import inspect
from typing import Any, Callable, Iterable, List, Optional, Union

from ..errors import MissingReceiver, UnsupportedDeclaration
from ..logging import get_logger
from .model import Binding, MethodSignature, Parameter, ParameterKind

logger = get_logger(__name__)

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]

_NESTED_SCOPES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)


def _decorator_name(decorator: ast.expr) -> Optional[str]:
    target = decorator.func if isinstance(decorator, ast.Call) else decorator
    if isinstance(target, ast.Name):
        return target.id
    if isinstance(target, ast.Attribute):
        return target.attr
    return None


def find_decorator(node: FunctionNode, names: Iterable[str]) -> List[ast.expr]:
    """Return the decorators of ``node`` whose (last dotted) name is in ``names``."""
    wanted = set(names)
    return [d for d in node.decorator_list if _decorator_name(d) in wanted]


def _contains_yield(body: List[ast.stmt]) -> bool:
    stack: List[ast.AST] = list(body)
    while stack:
        node = stack.pop()
        if isinstance(node, (ast.Yield, ast.YieldFrom)):
            return True
        if isinstance(node, _NESTED_SCOPES):
            continue
        stack.extend(ast.iter_child_nodes(node))
    return False


def _unparse(node: Optional[ast.AST]) -> Optional[str]:
    return ast.unparse(node) if node is not None else None


def extract_signature(node: FunctionNode, *, in_class: bool = True) -> MethodSignature:
    """
    Decompose a method declaration into receiver, parameters and return type.

    Args:
        node: ``def`` or ``async def`` statement
        in_class: Whether the statement sits directly in a class body

    Returns:
        MethodSignature of the declaration

    Raises:
        MissingReceiver: If the declaration is not an instance or class method
        UnsupportedDeclaration: If calls to it cannot be forwarded
    """
    if not in_class:
        raise MissingReceiver(
            f"The input function must have a self argument: {node.name!r} is not defined in a class body"
        )
    if find_decorator(node, ("staticmethod",)):
        raise MissingReceiver(f"The input function must have a self argument: {node.name!r} is a staticmethod")

    args = node.args
    positional = [(arg, ParameterKind.POSITIONAL_ONLY) for arg in args.posonlyargs]
    positional += [(arg, ParameterKind.POSITIONAL_OR_KEYWORD) for arg in args.args]
    if not positional:
        raise MissingReceiver(f"The input function must have a self argument: {node.name!r} takes no positional parameters")

    is_async = isinstance(node, ast.AsyncFunctionDef)
    is_generator = _contains_yield(node.body)
    if is_async and is_generator:
        raise UnsupportedDeclaration(f"Cannot forward calls to async generator {node.name!r}")

    # defaults line up with the tail of the positional parameters
    padding = [None] * (len(positional) - len(args.defaults))
    positional_defaults = padding + list(args.defaults)

    parameters = [
        Parameter(arg.arg, kind, _unparse(arg.annotation), _unparse(default))
        for (arg, kind), default in zip(positional[1:], positional_defaults[1:])
    ]
    if args.vararg is not None:
        parameters.append(Parameter(args.vararg.arg, ParameterKind.VAR_POSITIONAL, _unparse(args.vararg.annotation)))
    for arg, default in zip(args.kwonlyargs, args.kw_defaults):
        parameters.append(Parameter(arg.arg, ParameterKind.KEYWORD_ONLY, _unparse(arg.annotation), _unparse(default)))
    if args.kwarg is not None:
        parameters.append(Parameter(args.kwarg.arg, ParameterKind.VAR_KEYWORD, _unparse(args.kwarg.annotation)))

    binding = Binding.CLASS if find_decorator(node, ("classmethod",)) else Binding.INSTANCE

    signature = MethodSignature(
        name=node.name,
        receiver=positional[0][0].arg,
        parameters=tuple(parameters),
        return_type=_unparse(node.returns),
        is_async=is_async,
        is_generator=is_generator,
        binding=binding,
        arguments=args,
        returns=node.returns,
        type_params=tuple(getattr(node, "type_params", None) or ()),
    )
    logger.debug(f"Extracted signature for {node.name}: {signature}")
    return signature


_KIND_FROM_INSPECT = {
    inspect.Parameter.POSITIONAL_ONLY: ParameterKind.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD: ParameterKind.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL: ParameterKind.VAR_POSITIONAL,
    inspect.Parameter.KEYWORD_ONLY: ParameterKind.KEYWORD_ONLY,
    inspect.Parameter.VAR_KEYWORD: ParameterKind.VAR_KEYWORD,
}


def _format_annotation(annotation: Any) -> Optional[str]:
    if annotation is inspect.Parameter.empty:
        return None
    if isinstance(annotation, str):
        return annotation
    return inspect.formatannotation(annotation)


def _defined_in_class(func: Callable) -> bool:
    parts = func.__qualname__.split(".")
    return len(parts) >= 2 and parts[-2] != "<locals>"


def _inspect_signature(func: Callable) -> inspect.Signature:
    try:
        return inspect.signature(func, follow_wrapped=False)
    except NameError:
        # Deferred annotations may name classes that are still being built
        import annotationlib
        return inspect.signature(
            func, follow_wrapped=False, annotation_format=annotationlib.Format.FORWARDREF
        )


def signature_of(func: Any) -> MethodSignature:
    """
    Build a MethodSignature for a function object defined in a class body.

    Raises:
        MissingReceiver: If ``func`` is a staticmethod or a free function
        UnsupportedDeclaration: If ``func`` is not a Python function or is an async generator
    """
    binding = Binding.INSTANCE
    if isinstance(func, staticmethod):
        raise MissingReceiver(
            f"The input function must have a self argument: {func.__func__.__name__!r} is a staticmethod"
        )
    if isinstance(func, classmethod):
        func = func.__func__
        binding = Binding.CLASS
    if not inspect.isfunction(func):
        raise UnsupportedDeclaration(f"Expected a function defined with def, got {type(func).__name__}")
    if inspect.isasyncgenfunction(func):
        raise UnsupportedDeclaration(f"Cannot forward calls to async generator {func.__name__!r}")
    if not _defined_in_class(func):
        raise MissingReceiver(
            f"The input function must have a self argument: {func.__qualname__!r} is not defined in a class body"
        )

    inspected = _inspect_signature(func)
    params = list(inspected.parameters.values())
    if not params or params[0].kind not in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
        raise MissingReceiver(
            f"The input function must have a self argument: {func.__qualname__!r} takes no positional parameters"
        )

    parameters = tuple(
        Parameter(
            name=param.name,
            kind=_KIND_FROM_INSPECT[param.kind],
            annotation=_format_annotation(param.annotation),
            default=None if param.default is inspect.Parameter.empty else repr(param.default),
        )
        for param in params[1:]
    )
    return_annotation = inspected.return_annotation

    return MethodSignature(
        name=func.__name__,
        receiver=params[0].name,
        parameters=parameters,
        return_type=_format_annotation(return_annotation),
        is_async=inspect.iscoroutinefunction(func),
        is_generator=inspect.isgeneratorfunction(func),
        binding=binding,
    )
