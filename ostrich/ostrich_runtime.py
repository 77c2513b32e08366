# ostrich runtime: named functions, host binding and the line runner.

import inspect
import logging
from abc import ABC
from functools import reduce
from typing import Any, Dict, List, Optional, Union

from ostrich.ostrich_chain import Chain
from ostrich.ostrich_datatypes import IncompleteChain, Quoted
from ostrich.ostrich_evaluator import BuildResult, Evaluator
from ostrich.ostrich_transformer import LinkTransformer, ParseError, UnknownName

logger = logging.getLogger(__name__)

Number = Union[int, float]


def ostrich_api_method(func):
    """A decorator to explicitly mark host methods as usable in chains."""
    func._is_ostrich_api = True
    return func


class ChainHost(ABC):
    """The base class for Python objects that expose methods to a ChainRunner."""

    def api_methods(self) -> Dict[str, Any]:
        """Returns kebab-case names mapped to the bound methods marked with ostrich_api_method."""
        methods = {}
        for name, member in inspect.getmembers(self, predicate=inspect.ismethod):
            if getattr(member, '_is_ostrich_api', False):
                methods[name.lstrip('_').replace('_', '-')] = member
        return methods


# ===================================================================
# Standard Library
# ===================================================================

class StdLib:
    """Named functions available to textual chains.

    Each `_name` method is bound as `name` (underscores become dashes).
    Variadic numeric functions take as many numbers as follow them unless a
    `...N` marker says otherwise.
    """

    # --- Arithmetic ---
    def _add(self, a, b): return a + b
    def _sub(self, a, b): return a - b
    def _mul(self, a, b): return a * b
    def _div(self, a, b): return a / b
    def _neg(self, x): return -x

    def _sum(self, *ns: Number) -> Number:
        return sum(ns)

    def _product(self, *ns: Number) -> Number:
        return reduce(lambda a, b: a * b, ns, 1)

    def _max(self, first: Number, *rest: Number) -> Number:
        return max(first, *rest)

    def _min(self, first: Number, *rest: Number) -> Number:
        return min(first, *rest)

    # --- Strings ---
    def _concat(self, *parts: str) -> str:
        return "".join(parts)

    def _join(self, separator: str, *parts: str) -> str:
        return separator.join(parts)

    def _upper(self, s): return s.upper()
    def _lower(self, s): return s.lower()

    # --- Conversion ---
    def _str(self, value): return str(value)
    def _int(self, value): return int(value)
    def _float(self, value): return float(value)
    def _len(self, collection): return len(collection)

    def _list(self, *items) -> list:
        return list(items)

    def _range(self, start, stop): return list(range(start, stop))

    # --- Stack shaping ---
    def _swap(self, a, b): return b, a
    def _dup(self, a): return a, a

    def _drop(self, a) -> None:
        return None

    # --- Higher order ---
    def call_with(self, fn, args, caller):
        """Runs `fn` over `args` as a nested chain; not exposed as a name."""
        try:
            return Evaluator().evaluate((fn, *(Quoted(a) for a in args)))
        except IncompleteChain as e:
            raise TypeError(f"{caller}: {e}") from e

    def _map(self, fn, items):
        out = []
        for item in items:
            results = self.call_with(fn, [item], "map")
            out.append(results[0] if len(results) == 1 else results)
        return out

    def _apply(self, fn, args):
        """Runs `fn` as a one-link chain over the list `args`."""
        return tuple(self.call_with(fn, args, "apply"))


# ===================================================================
# Line Runner
# ===================================================================

class ChainRunner:
    """Parses, transforms, and builds lines of chain notation."""

    def __init__(self, host_object: Optional[ChainHost] = None, load_stdlib: bool = True):
        self.host_object = host_object
        self.names: Dict[str, Any] = {}
        self.transformer = LinkTransformer()
        self.last_chain: Optional[Chain] = None

        if load_stdlib:
            stdlib = StdLib()
            for name, member in inspect.getmembers(stdlib):
                if name.startswith('_') and not name.startswith('__') and callable(member):
                    self.names[name[1:].replace('_', '-')] = member

        # Host methods shadow stdlib names
        if host_object is not None:
            self.names.update(host_object.api_methods())

    def bind(self, name: str, value: Any):
        """Binds a name for later lines; callables become callable links."""
        self.names[name] = value

    def parse(self, source: str) -> tuple[Optional[str], Chain]:
        nodes = self.transformer.parse_nodes(source)
        target, nodes = self.transformer.split_binding(nodes)
        links = self.transformer.transform(nodes, self.names)
        return target, Chain(links)

    def _error(self, message: str, links=(), error: Optional[BaseException] = None, stacktrace=None) -> BuildResult:
        return BuildResult(status='error', error=error, error_message=message,
                           links=tuple(links), stacktrace=list(stacktrace or []))

    def handle_line(self, source: str) -> BuildResult:
        """Builds one line. Every failure is reported as an error result."""
        try:
            target, chain = self.parse(source)
        except ParseError as e:
            return self._error(f"ParseError: {e}", error=e)
        except UnknownName as e:
            return self._error(f"NameError: {e}", error=e)

        self.last_chain = chain
        evaluator = Evaluator()
        try:
            result = evaluator.build(chain.links)
        except Exception as e:
            logger.debug("chain raised %s", type(e).__name__, exc_info=True)
            frame = evaluator.call_stack[-1] if evaluator.call_stack else None
            err = self._error(f"{type(e).__name__}: {e}", links=chain.links, error=e,
                              stacktrace=evaluator.completed + ([frame] if frame else []))
            return err

        if result.ok and target is not None:
            self.bind(target, result.value)
        return result

    def handle_script(self, source: str) -> List[BuildResult]:
        """Runs each non-empty, non-comment line, stopping at the first error."""
        results = []
        for line in source.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith('#'):
                continue
            res = self.handle_line(stripped)
            results.append(res)
            if not res.ok:
                break
        return results


__all__ = [
    "ChainHost",
    "ChainRunner",
    "IncompleteChain",
    "StdLib",
    "ostrich_api_method",
]
