
"""
Defines the core data types for the ostrich chaining engine.

This module provides the marker literals that steer evaluation, the single
engine failure, and the introspection wrapper that turns an arbitrary Python
callable into something the evaluator can size and invoke.
"""

import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, List, Optional


class IncompleteChain(Exception):
    """Raised when a callable needs more arguments than the stack holds."""
    def __init__(self, position: int, link: Any, required: int, available: int):
        self.position = position
        self.link = link
        self.required = required
        self.available = available
        from ostrich.ostrich_printer import Printer  # local import to avoid cycle
        name = Printer().callable_name(link)
        super().__init__(
            f"{name} needs {required} argument{'s' if required != 1 else ''}, {available} available"
        )


# =================================================================
# Marker Literals
# =================================================================

@dataclass(frozen=True)
class VarArgs:
    """Tells the next variadic callable how many values its `*args` takes.

    Only meaningful as the top of the stack right before a variadic callable
    runs; anywhere else it is an ordinary literal.
    """
    count: int

    def __post_init__(self):
        if isinstance(self.count, bool) or not isinstance(self.count, int):
            raise TypeError(f"VarArgs count must be an int, not {type(self.count).__name__}")
        if self.count < 0:
            raise ValueError(f"VarArgs count must be non-negative, got {self.count}")

    def __repr__(self) -> str:
        return f"VarArgs({self.count})"


@dataclass(frozen=True)
class Quoted:
    """Pushes `value` verbatim, even when it is callable."""
    value: Any

    def __repr__(self) -> str:
        return f"Quoted({self.value!r})"


def is_callable_link(obj: Any) -> bool:
    """True if the evaluator should call `obj` rather than push it."""
    if isinstance(obj, (VarArgs, Quoted)):
        return False
    return callable(obj)


def link_name(obj: Any) -> str:
    if isinstance(obj, CallableLink):
        return obj.name
    for attr in ('__name__', '__qualname__'):
        n = getattr(obj, attr, None)
        if isinstance(n, str) and n:
            return n
    return type(obj).__name__


# =================================================================
# Explicit Signatures
# =================================================================

_SIGNATURE_ATTR = '_ostrich_signature'


@dataclass(frozen=True)
class LinkSignature:
    """Declared calling shape of a callable link."""
    arity: int
    variadic: bool = False
    element: Any = object
    returns_nothing: bool = False

    def __post_init__(self):
        if self.arity < 0:
            raise ValueError(f"arity must be non-negative, got {self.arity}")
        if self.variadic and self.arity < 1:
            raise ValueError("a variadic signature counts its *args slot, so arity must be at least 1")


def link_signature(arity: int, variadic: bool = False, element: Any = object, returns_nothing: bool = False):
    """Declares link metadata for callables `inspect.signature` cannot read.

    Usable as a decorator or called directly on an existing callable::

        @link_signature(2)
        def pair(a, b): ...

        safe_max = link_signature(2, variadic=True, element=int)(max)

    The callable is wrapped rather than annotated, so other uses of the same
    function keep their own signature.
    """
    sig = LinkSignature(arity, variadic, element, returns_nothing)

    def decorate(func):
        return _DeclaredCallable(func, sig)
    return decorate


class _DeclaredCallable:
    """Carries a LinkSignature alongside the callable it describes."""
    def __init__(self, func, sig: LinkSignature):
        self.func = func
        self._ostrich_signature = sig
        self.__name__ = link_name(func)

    def __call__(self, *args):
        return self.func(*args)

    def __eq__(self, other):
        if not isinstance(other, _DeclaredCallable):
            return NotImplemented
        return self.func == other.func and self._ostrich_signature == other._ostrich_signature

    def __hash__(self):
        return hash((self.func, self._ostrich_signature))

    def __repr__(self) -> str:
        return f"<declared {self.__name__}>"


# =================================================================
# Callable Introspection
# =================================================================

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


# Builtin types whose constructors inspect cannot read, sized as converters.
_BUILTIN_SIGNATURES = {
    t: LinkSignature(1)
    for t in (str, int, float, bool, complex, bytes, list, tuple, dict, set, frozenset)
}

# Callables with no readable signature take one argument.
_UNREADABLE = LinkSignature(1)


def _read_signature(func) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(func, eval_str=True)
    except ValueError:
        return None
    except (NameError, SyntaxError, TypeError, AttributeError):
        # Forward references that cannot be resolved; fall back to raw strings.
        pass
    try:
        return inspect.signature(func)
    except ValueError:
        return None


def _normalize_annotation(ann: Any) -> Any:
    if ann is inspect.Parameter.empty or ann is typing.Any or isinstance(ann, str):
        return object
    return ann


def value_matches(value: Any, ann: Any) -> bool:
    """True if `value` is compatible with the annotation `ann`.

    bool is a subclass of int, so it only matches an explicit bool.
    """
    if isinstance(value, VarArgs):
        return False
    ann = _normalize_annotation(ann)
    if ann is object:
        return True
    if ann is None or ann is type(None):
        return value is None
    origin = typing.get_origin(ann)
    if origin is typing.Union or origin is types.UnionType:
        return any(value_matches(value, arg) for arg in typing.get_args(ann))
    if origin is typing.Literal:
        return value in typing.get_args(ann)
    if origin is not None:
        ann = origin
    if not isinstance(ann, type):
        return False
    if isinstance(value, bool) and ann is int:
        return False
    return isinstance(value, ann)


class CallableLink:
    """Erases a Python callable into the shape the evaluator needs.

    `arity` counts positional parameters, a trailing `*args` counting as one
    slot. Keyword-only parameters are never fed from the stack.
    """
    def __init__(self, func: Any):
        self.func = func
        self.name = link_name(func)
        declared = getattr(func, _SIGNATURE_ATTR, None)
        if not isinstance(declared, LinkSignature) and isinstance(func, type):
            declared = _BUILTIN_SIGNATURES.get(func)
        sig = None
        if not isinstance(declared, LinkSignature):
            sig = _read_signature(func)
            if sig is None:
                declared = _UNREADABLE
        if isinstance(declared, LinkSignature):
            self.arity = declared.arity
            self.is_variadic = declared.variadic
            self.variadic_type = _normalize_annotation(declared.element) if declared.variadic else None
            self.returns_nothing = declared.returns_nothing
            return

        params = list(sig.parameters.values())
        fixed = [p for p in params if p.kind in _POSITIONAL]
        rest = next((p for p in params if p.kind is inspect.Parameter.VAR_POSITIONAL), None)
        self.is_variadic = rest is not None
        self.arity = len(fixed) + (1 if self.is_variadic else 0)
        self.variadic_type = _normalize_annotation(rest.annotation) if rest is not None else None
        self.returns_nothing = sig.return_annotation is None or sig.return_annotation == 'None'

    @property
    def fixed_arity(self) -> int:
        return self.arity - 1 if self.is_variadic else self.arity

    def accepts(self, value: Any) -> bool:
        """True if `value` may be bound to the variadic parameter."""
        if not self.is_variadic:
            return False
        return value_matches(value, self.variadic_type)

    def invoke(self, args: List[Any]) -> List[Any]:
        """Calls the wrapped callable and normalizes its return into a list."""
        ret = self.func(*args)
        if type(ret) is tuple:
            return list(ret)
        if ret is None and self.returns_nothing:
            return []
        return [ret]

    def __repr__(self) -> str:
        star = ", variadic" if self.is_variadic else ""
        return f"<CallableLink {self.name} arity={self.arity}{star}>"
