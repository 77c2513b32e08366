import logging
from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional, Sequence

from ostrich.ostrich_datatypes import (
    CallableLink, IncompleteChain, Quoted, VarArgs, is_callable_link
)

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """The structured result of evaluating a chain."""
    status: Literal['success', 'error']
    values: List[Any] = field(default_factory=list)
    error: Optional[BaseException] = None
    error_message: Optional[str] = None
    links: Sequence[Any] = ()
    stacktrace: List[dict] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == 'success'

    @property
    def value(self) -> Any:
        """The single result, the result list when there are several, or None."""
        if not self.values:
            return None
        if len(self.values) == 1:
            return self.values[0]
        return list(self.values)

    def unwrap(self) -> List[Any]:
        """Returns the values, re-raising the captured failure if there is one."""
        if self.status == 'error':
            if self.error is not None:
                raise self.error
            raise RuntimeError(self.error_message or "build failed")
        return self.values

    def format_error(self) -> str:
        """Formats the failure with the offending link marked in the chain."""
        if self.status != 'error':
            return ""
        from ostrich.ostrich_printer import Printer
        pr = Printer()
        msg = str(self.error_message or "Unknown error")
        position = getattr(self.error, 'position', None)
        if self.links and position is not None:
            msg = f"{msg}\n{pr.pformat_marked(self.links, position)}"
        if self.stacktrace:
            frames = " ".join(pr.pformat_frame(f) for f in self.stacktrace)
            msg = f"{msg}\nostrich stacktrace: {frames}"
        return msg


class Evaluator:
    """The ostrich evaluation engine.

    Reads a link sequence as a right-to-left stack program. Each instance
    keeps its own stack and call stack, so create one per evaluation when
    building concurrently.
    """
    def __init__(self):
        self.stack: List[Any] = []
        self.call_stack: List[dict] = []
        # Frames of calls that returned, in evaluation order.
        self.completed: List[dict] = []
        # The arity failure raised by this evaluator, as opposed to one raised
        # inside a chained callable.
        self.failure: Optional[IncompleteChain] = None

    def _dbg(self, *parts):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(" ".join(str(p) for p in parts))

    def _push_frame(self, position, link: CallableLink, args):
        self.call_stack.append({
            'name': link.name,
            'func': link.func,
            'args': args,
            'position': position,
        })

    def _pop_frame(self):
        if self.call_stack:
            self.call_stack.pop()

    def build(self, links: Sequence[Any]) -> BuildResult:
        """Evaluates `links`, capturing its own IncompleteChain into the result.

        Exceptions raised by the chained callables propagate unchanged, an
        IncompleteChain from a nested chain included.
        """
        links = tuple(links)
        try:
            values = self.evaluate(links)
        except IncompleteChain as e:
            if e is not self.failure:
                raise
            self._dbg("Incomplete chain at", e.position, "required", e.required, "available", e.available)
            return BuildResult(
                status='error',
                error=e,
                error_message=f"IncompleteChain: {e}",
                links=links,
                stacktrace=list(self.completed),
            )
        return BuildResult(status='success', values=values, links=links)

    def evaluate(self, links: Sequence[Any]) -> List[Any]:
        """Runs the stack program and returns the remaining stack, first result first."""
        self.stack = []
        self.call_stack = []
        self.completed = []
        self.failure = None
        for position in range(len(links) - 1, -1, -1):
            link = links[position]
            if is_callable_link(link):
                self._call_link(position, CallableLink(link))
            else:
                value = link.value if isinstance(link, Quoted) else link
                self._dbg("PUSH", position, type(value).__name__)
                self.stack.append(value)
        result = list(reversed(self.stack))
        self.stack = []
        return result

    def resolve_arity(self, link: CallableLink) -> int:
        """Returns how many stack values `link` consumes.

        Pops a VarArgs marker sitting on top of the stack for variadic links.
        """
        stack = self.stack
        n, m = len(stack), link.arity
        if link.is_variadic and n != 0:
            top = stack[-1]
            if isinstance(top, VarArgs):
                stack.pop()
                m = m + top.count - 1
                self._dbg("VarArgs", top.count, "for", link.name)
            else:
                # Greedy: extend past the fixed arguments while values type-match.
                while n - m >= 0 and link.accepts(stack[n - m]):
                    m += 1
                m -= 1
        return m

    def _call_link(self, position: int, link: CallableLink):
        m = self.resolve_arity(link)
        n = len(self.stack)
        if n - m < 0:
            self.failure = IncompleteChain(position, link.func, m, n)
            raise self.failure
        args = list(reversed(self.stack[n - m:]))
        del self.stack[n - m:]
        self._dbg("CALL", link.name, "at", position, "argc", m, "arg_types", [type(a).__name__ for a in args])
        self._push_frame(position, link, args)
        results = link.invoke(args)
        self._pop_frame()
        self.completed.append({'name': link.name, 'func': link.func, 'args': args, 'position': position})
        self._dbg("RET", link.name, "count", len(results))
        self.stack.extend(reversed(results))
