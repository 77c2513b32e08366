"""
A pretty-printer for ostrich links, chains and results.

Output uses the same notation the runner reads, so a printed chain can be
pasted back into the REPL when all of its callables are bound by name.
"""
import collections.abc
import inspect

from ostrich.ostrich_datatypes import Quoted, VarArgs, is_callable_link, link_name


class Printer:
    """Formats ostrich values into readable chain notation."""

    def __init__(self, max_width=None):
        self.max_width = max_width
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        text = handler(obj)
        if self.max_width and len(text) > self.max_width:
            return text[:max(self.max_width - 3, 0)] + "..."
        return text

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        from ostrich.ostrich_chain import Chain
        if isinstance(obj, Chain):
            return self._pformat_chain
        if is_callable_link(obj):
            return self._pformat_callable
        if isinstance(obj, collections.abc.Mapping):
            return self._pformat_dict
        if isinstance(obj, (list, tuple)):
            return self._pformat_list
        # Default to Python's repr for unknown types
        return repr

    def _create_handlers(self):
        return {
            str: self._pformat_str,
            int: self._pformat_primitive,
            float: self._pformat_primitive,
            bool: self._pformat_bool,
            type(None): self._pformat_none,
            VarArgs: self._pformat_varargs,
            Quoted: self._pformat_quoted,
        }

    def _pformat_primitive(self, obj):
        return str(obj)

    def _pformat_str(self, obj):
        # Basic string formatting, does not handle embedded quotes
        return f"'{obj}'"

    def _pformat_bool(self, obj):
        return 'true' if obj else 'false'

    def _pformat_none(self, obj):
        return 'null'

    def _pformat_varargs(self, obj):
        return f"...{obj.count}"

    def _pformat_quoted(self, obj):
        inner = obj.value
        if is_callable_link(inner):
            return f"`{self.callable_name(inner)}"
        return self.pformat(inner)

    def _pformat_callable(self, obj):
        return self.callable_name(obj)

    def _pformat_list(self, obj):
        return "[" + ", ".join(self.pformat(item) for item in obj) + "]"

    def _pformat_dict(self, obj):
        items = ", ".join(f"{self.pformat(k)}: {self.pformat(v)}" for k, v in obj.items())
        return "{" + items + "}"

    def _pformat_chain(self, obj):
        return f"Chain[{self.pformat_links(obj.links)}]"

    def callable_name(self, fn) -> str:
        """Kebab-case names for StdLib and host methods, plain names otherwise."""
        if inspect.ismethod(fn):
            from ostrich.ostrich_runtime import StdLib
            if isinstance(fn.__self__, StdLib) or getattr(fn, '_is_ostrich_api', False):
                return fn.__name__.lstrip('_').replace('_', '-')
        return link_name(fn)

    def pformat_links(self, links) -> str:
        return " ".join(self.pformat(link) for link in links)

    def pformat_marked(self, links, position: int) -> str:
        """Renders links on one line with a caret under the link at `position`."""
        parts = [self.pformat(link) for link in links]
        line = " ".join(parts)
        offset = sum(len(p) + 1 for p in parts[:position])
        return f"  | {line}\n  | {' ' * offset}^"

    def pformat_frame(self, frame) -> str:
        name = frame.get('name') or '<call>'
        func = frame.get('func')
        if func is not None:
            name = self.callable_name(func)
        args = " ".join(self.pformat(a) for a in frame.get('args') or [])
        return f"({name} {args})" if args else f"({name})"
