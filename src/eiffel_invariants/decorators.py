"""
Runtime form of invariant injection.

``check_invariant`` performs the same transformation as the source rewriter,
but at class-construction time::

    class Account:
        def __init__(self, balance):
            self.balance = balance

        def is_solvent(self):
            return self.balance >= 0

        @check_invariant(is_solvent)
        def withdraw(self, amount):
            self.balance -= amount

The original function is installed as ``withdraw_no_invariant`` and a
compiled wrapper, synthesized from the method's signature, takes the name
``withdraw``.
"""

import ast
import functools
from typing import Any, Callable, Optional

from .attributes import AttributeSpec, parse_attribute, tokens_from_values
from .config import Settings
from .errors import InvariantViolation, UnsupportedDeclaration
from .logging import get_logger
from .signature import Binding, MethodSignature, signature_of
from .synthesis import renamed_name, synthesize

logger = get_logger(__name__)


def _mangled(name: str, owner: type) -> str:
    """Attribute name a class body stores ``name`` under."""
    stripped = owner.__name__.lstrip("_")
    if name.startswith("__") and not name.endswith("__") and stripped and owner.__name__.isidentifier():
        return f"_{stripped}{name}"
    return name


def _compile_wrapper(
    spec: AttributeSpec, signature: MethodSignature, func: Callable, settings: Settings, owner: type
) -> Callable:
    # The wrapper only delegates, so the original body is not needed here.
    result = synthesize(
        spec,
        signature,
        [ast.Pass()],
        settings,
        with_defaults=False,
        with_annotations=False,
    )
    # Name mangling ignores leading underscores, so this scope mangles like the owner
    scope = f"_{owner.__name__}"
    if not scope.isidentifier():
        scope = "_"
    module = ast.parse(f"class {scope}:\n    pass\n")
    module.body[0].body = [result.wrapper]
    ast.fix_missing_locations(module)

    namespace = {settings.violation_name: InvariantViolation}
    code = compile(module, filename=f"<check_invariant {func.__qualname__}>", mode="exec")
    exec(code, namespace)

    wrapper = vars(namespace[scope])[_mangled(signature.name, owner)]
    wrapper.__defaults__ = func.__defaults__
    wrapper.__kwdefaults__ = func.__kwdefaults__
    functools.update_wrapper(wrapper, func)
    wrapper.__check_invariant__ = spec
    return wrapper


class GuardedMethod:
    """
    Placeholder left in the class body by ``check_invariant``.

    When the owning class is created it replaces itself with the wrapper and
    installs the original function under its renamed name.
    """

    def __init__(self, spec: AttributeSpec, func: Any, settings: Settings) -> None:
        self.spec = spec
        self.func = func
        self.settings = settings
        self.signature = signature_of(func)

    def __set_name__(self, owner: type, name: str) -> None:
        # Python < 3.12 reports errors raised here as RuntimeError with this one as __cause__
        renamed = _mangled(renamed_name(self.signature.name, self.settings), owner)
        if renamed in vars(owner):
            raise UnsupportedDeclaration(
                f"{owner.__qualname__} already defines {renamed!r}; "
                f"cannot keep the original body of {name!r} under that name"
            )
        raw = self.func.__func__ if isinstance(self.func, classmethod) else self.func
        wrapper = _compile_wrapper(self.spec, self.signature, raw, self.settings, owner)
        if self.signature.binding is Binding.CLASS:
            wrapper = classmethod(wrapper)
        setattr(owner, renamed, self.func)
        setattr(owner, name, wrapper)
        logger.debug(
            f"Installed {owner.__qualname__}.{name} guarded by {self.spec.invariant_name} "
            f"({self.spec.timing.value})"
        )

    def __call__(self, *args, **kwargs):
        # Only reachable when another decorator wrapped the placeholder before the class was built
        raise UnsupportedDeclaration(
            f"{self.signature.name!r} was never installed: check_invariant must be the outermost "
            f"decorator of a method defined in a class body"
        )


def check_invariant(*args: Any, settings: Optional[Settings] = None, **kwargs: Any) -> Callable[[Any], GuardedMethod]:
    """
    Guard a method with an invariant predicate of its receiver.

    Args:
        *args: The invariant method (or its name), optionally followed by a
            timing keyword: ``"before"``, ``"after"`` or ``"before_and_after"``
            (synonyms ``"require"``, ``"ensure"``, ``"require_and_ensure"``)
        settings: Naming settings, defaults to ``Settings()``
        **kwargs: ``check_time="..."`` is accepted in place of the positional
            timing keyword

    Returns:
        Decorator for a method defined in a class body

    Raises:
        MalformedAttribute: If the invariant is missing or not an identifier
        InvalidTimingKeyword: If the timing keyword is not recognized
        MissingReceiver: If the decorated function is not a method
        UnsupportedDeclaration: If the decorated method is already guarded, or when
            the class is created, if the renamed name is taken. Python before 3.12
            reports the latter as a RuntimeError caused by UnsupportedDeclaration
    """
    settings = settings or Settings()
    spec = parse_attribute(tokens_from_values(args, kwargs), default_timing=settings.default_timing)

    def decorator(func: Any) -> GuardedMethod:
        if isinstance(func, GuardedMethod):
            raise UnsupportedDeclaration(
                f"{func.signature.name!r} is already guarded by {func.spec.invariant_name!r}; "
                f"check_invariant cannot be stacked"
            )
        return GuardedMethod(spec, func, settings)

    return decorator
