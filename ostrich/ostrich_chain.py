"""
The chain builder.

A Chain holds an ordered tuple of links. Builder methods never touch the
receiver; each one returns a new Chain. Nothing is checked or evaluated until
`build` is called.

    Chain([f, g]).compose(h, k)            -> Chain([f, g, h, k]);  f(g(h(k)))
    Chain([f, g]).then(h, k)               -> Chain([k, h, f, g]);  k(h(f(g)))
"""

from typing import Any, Iterable, Iterator

from ostrich.ostrich_evaluator import BuildResult, Evaluator


class Chain:
    """An ordered, immutable sequence of links (callables and literals)."""

    __slots__ = ('_links',)

    def __init__(self, links: Iterable[Any] = ()):
        self._links = tuple(links)

    @property
    def links(self) -> tuple:
        return self._links

    def compose(self, *links: Any) -> 'Chain':
        """Appends links in the given order."""
        return Chain(self._links + links)

    def then(self, *links: Any) -> 'Chain':
        """Prepends links in reverse order, so the last one given ends up first."""
        return Chain(links[::-1] + self._links)

    def merge_compose(self, *chains: 'Chain') -> 'Chain':
        """Appends the links of each chain, in the order given.

        Chain([f, g]).merge_compose(Chain([h, k]), Chain([l, m]))
        -> Chain([f, g, h, k, l, m])
        """
        result = Chain(self._links)
        for chain in chains:
            result = result.compose(*chain.links)
        return result

    def merge_then(self, *chains: 'Chain') -> 'Chain':
        """Prepends the links of each chain via `then`, one chain at a time.

        Chain([f, g]).merge_then(Chain([h, k]), Chain([l, m]))
        -> Chain([m, l, k, h, f, g])
        """
        result = Chain(self._links)
        for chain in chains:
            result = result.then(*chain.links)
        return result

    def build(self) -> BuildResult:
        """Evaluates the chain.

        Walks the links from last to first: literals are pushed, callables
        take their arguments from the top of the stack and push their results
        back in reverse. For a variadic callable, a VarArgs marker on top of the
        stack fixes how many values its `*args` takes; without one it takes as
        many consecutive values as match the `*args` annotation.

        An IncompleteChain is returned as an error result; exceptions raised by
        the chained callables propagate.
        """
        return Evaluator().build(self._links)

    def __len__(self) -> int:
        return len(self._links)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._links)

    def __eq__(self, other):
        if not isinstance(other, Chain):
            return NotImplemented
        return self._links == other._links

    __hash__ = None

    def __repr__(self) -> str:
        from ostrich.ostrich_printer import Printer
        return Printer().pformat(self)


def new() -> Chain:
    """Creates a new empty chain."""
    return Chain()
