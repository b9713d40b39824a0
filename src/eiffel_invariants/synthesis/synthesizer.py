"""
Code synthesis for invariant-guarded methods.

Given the parsed decorator arguments, the method signature and the original
body, this module emits two ``ast`` function definitions:

* the original body under ``<name><suffix>`` (``my_method_no_invariant``)
* a wrapper under the original name that checks the invariant, delegates to
  the renamed method and checks the invariant again, as the timing policy
  dictates
"""

import ast
import copy
from typing import List, Optional, Sequence

from ..attributes.model import AttributeSpec
from ..config import Settings
from ..errors import Phase
from ..logging import get_logger
from ..signature.model import Binding, MethodSignature, ParameterKind
from .model import FunctionNode, TransformationResult

logger = get_logger(__name__)


def renamed_name(name: str, settings: Optional[Settings] = None) -> str:
    """Name under which the original body is kept."""
    settings = settings or Settings()
    return f"{name}{settings.suffix}"


def _parse_expr(text: str) -> ast.expr:
    return ast.parse(text, mode="eval").body


def _load(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def build_arguments(
    signature: MethodSignature,
    *,
    with_defaults: bool = True,
    with_annotations: bool = True,
) -> ast.arguments:
    """
    Reproduce the parameter list of ``signature`` as an ``ast.arguments`` node.

    Source-derived signatures are copied verbatim. Otherwise the list is
    rebuilt from the captured parameters; runtime callers drop defaults and
    annotations and restore them on the compiled function instead.
    """
    if signature.arguments is not None and with_defaults and with_annotations:
        return copy.deepcopy(signature.arguments)

    def make_arg(name: str, annotation: Optional[str] = None) -> ast.arg:
        node = _parse_expr(annotation) if (with_annotations and annotation) else None
        return ast.arg(arg=name, annotation=node)

    posonlyargs: List[ast.arg] = []
    args: List[ast.arg] = []
    positional_defaults: List[Optional[str]] = []
    kwonlyargs: List[ast.arg] = []
    kw_defaults: List[Optional[ast.expr]] = []
    vararg = kwarg = None

    has_posonly = any(p.kind is ParameterKind.POSITIONAL_ONLY for p in signature.parameters)
    (posonlyargs if has_posonly else args).append(ast.arg(arg=signature.receiver))

    for parameter in signature.parameters:
        if parameter.kind is ParameterKind.POSITIONAL_ONLY:
            posonlyargs.append(make_arg(parameter.name, parameter.annotation))
            positional_defaults.append(parameter.default)
        elif parameter.kind is ParameterKind.POSITIONAL_OR_KEYWORD:
            args.append(make_arg(parameter.name, parameter.annotation))
            positional_defaults.append(parameter.default)
        elif parameter.kind is ParameterKind.VAR_POSITIONAL:
            vararg = make_arg(parameter.name, parameter.annotation)
        elif parameter.kind is ParameterKind.KEYWORD_ONLY:
            kwonlyargs.append(make_arg(parameter.name, parameter.annotation))
            has_default = with_defaults and parameter.default is not None
            kw_defaults.append(_parse_expr(parameter.default) if has_default else None)
        else:
            kwarg = make_arg(parameter.name, parameter.annotation)

    defaults: List[ast.expr] = []
    if with_defaults:
        # only the trailing run of positional parameters can carry defaults
        for default in positional_defaults:
            if default is None:
                defaults = []
            else:
                defaults.append(_parse_expr(default))

    return ast.arguments(
        posonlyargs=posonlyargs,
        args=args,
        vararg=vararg,
        kwonlyargs=kwonlyargs,
        kw_defaults=kw_defaults,
        kwarg=kwarg,
        defaults=defaults,
    )


def _returns(signature: MethodSignature, with_annotations: bool) -> Optional[ast.expr]:
    if not with_annotations:
        return None
    if signature.returns is not None:
        return copy.deepcopy(signature.returns)
    if signature.return_type is not None:
        return _parse_expr(signature.return_type)
    return None


def _function_def(
    signature: MethodSignature,
    name: str,
    arguments: ast.arguments,
    body: List[ast.stmt],
    decorators: Sequence[ast.expr],
    returns: Optional[ast.expr],
) -> FunctionNode:
    node_type = ast.AsyncFunctionDef if signature.is_async else ast.FunctionDef
    fields = dict(
        name=name,
        args=arguments,
        body=body,
        decorator_list=list(decorators),
        returns=returns,
        type_comment=None,
    )
    if "type_params" in node_type._fields:
        fields["type_params"] = copy.deepcopy(list(signature.type_params))
    return node_type(**fields)


def _result_name(signature: MethodSignature, base: str) -> str:
    taken = set(signature.parameter_names) | {signature.receiver}
    name = base
    while name in taken:
        name += "_"
    return name


def _guard(spec: AttributeSpec, signature: MethodSignature, phase: Phase, settings: Settings) -> ast.If:
    predicate = ast.Call(
        func=ast.Attribute(value=_load(signature.receiver), attr=spec.invariant_name, ctx=ast.Load()),
        args=[],
        keywords=[],
    )
    violation = ast.Call(
        func=_load(settings.violation_name),
        args=[ast.Constant(spec.invariant_name), ast.Constant(phase.value)],
        keywords=[],
    )
    return ast.If(
        test=ast.UnaryOp(op=ast.Not(), operand=predicate),
        body=[ast.Raise(exc=violation, cause=None)],
        orelse=[],
    )


def _forwarding_call(signature: MethodSignature, target: str) -> ast.expr:
    args: List[ast.expr] = []
    keywords: List[ast.keyword] = []
    for parameter in signature.parameters:
        if parameter.is_positional:
            args.append(_load(parameter.name))
        elif parameter.kind is ParameterKind.VAR_POSITIONAL:
            args.append(ast.Starred(value=_load(parameter.name), ctx=ast.Load()))
        elif parameter.kind is ParameterKind.KEYWORD_ONLY:
            keywords.append(ast.keyword(arg=parameter.name, value=_load(parameter.name)))
        else:
            keywords.append(ast.keyword(arg=None, value=_load(parameter.name)))

    call: ast.expr = ast.Call(
        func=ast.Attribute(value=_load(signature.receiver), attr=target, ctx=ast.Load()),
        args=args,
        keywords=keywords,
    )
    if signature.is_async:
        call = ast.Await(value=call)
    elif signature.is_generator:
        call = ast.YieldFrom(value=call)
    return call


def synthesize(
    spec: AttributeSpec,
    signature: MethodSignature,
    body: Sequence[ast.stmt],
    settings: Optional[Settings] = None,
    *,
    decorators: Sequence[ast.expr] = (),
    with_defaults: bool = True,
    with_annotations: bool = True,
) -> TransformationResult:
    """
    Build the renamed original and the guarded wrapper for one method.

    Args:
        spec: Parsed decorator arguments
        signature: Signature of the annotated method
        body: Statements of the original method body
        settings: Naming settings, defaults to ``Settings()``
        decorators: Decorators kept on the wrapper
        with_defaults: Reproduce parameter defaults in the emitted signatures
        with_annotations: Reproduce annotations in the emitted signatures

    Returns:
        TransformationResult with both method definitions
    """
    settings = settings or Settings()
    target = renamed_name(signature.name, settings)

    renamed_decorators = [_load("classmethod")] if signature.binding is Binding.CLASS else []
    renamed_original = _function_def(
        signature,
        target,
        build_arguments(signature, with_defaults=with_defaults, with_annotations=with_annotations),
        copy.deepcopy(list(body)),
        renamed_decorators,
        _returns(signature, with_annotations),
    )

    wrapper_body: List[ast.stmt] = []
    if spec.timing.checks_entry:
        wrapper_body.append(_guard(spec, signature, Phase.ENTRY, settings))

    call = _forwarding_call(signature, target)
    result_name = _result_name(signature, settings.result_name)
    if signature.returns_value:
        wrapper_body.append(ast.Assign(targets=[ast.Name(id=result_name, ctx=ast.Store())], value=call))
    else:
        wrapper_body.append(ast.Expr(value=call))

    if spec.timing.checks_exit:
        wrapper_body.append(_guard(spec, signature, Phase.EXIT, settings))

    if signature.returns_value:
        wrapper_body.append(ast.Return(value=_load(result_name)))

    wrapper = _function_def(
        signature,
        signature.name,
        build_arguments(signature, with_defaults=with_defaults, with_annotations=with_annotations),
        wrapper_body,
        [copy.deepcopy(d) for d in decorators],
        _returns(signature, with_annotations),
    )

    # Generated statements take the position of the first body statement
    for node in (renamed_original, wrapper):
        if body and hasattr(body[0], "lineno"):
            ast.copy_location(node, body[0])
        ast.fix_missing_locations(node)

    logger.debug(
        f"Synthesized {signature.name} -> {target} "
        f"(invariant={spec.invariant_name}, timing={spec.timing.value})"
    )
    return TransformationResult(renamed_original=renamed_original, wrapper=wrapper)
