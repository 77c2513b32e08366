"""
Turns a line of chain notation into links.

    add 1 mul 2 3          -> [add, 1, mul, 2, 3]
    sum ...2 1 2 3         -> [sum, VarArgs(2), 1, 2, 3]
    map `neg [1, 2]        -> [map, Quoted(neg), [1, 2]]

The line is parsed by koine against grammar/ostrich_grammar.yaml; this module
maps the tagged leaves of that AST onto runtime values.
"""
import re
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from koine import Parser

from ostrich.ostrich_datatypes import Quoted, VarArgs
from ostrich.ostrich_serialize import parse_flow

GRAMMAR_PATH = Path(__file__).parent / "grammar" / "ostrich_grammar.yaml"

_ESCAPE = re.compile(r"\\(.)")


class ParseError(Exception):
    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position


class UnknownName(NameError):
    def __init__(self, name: str, position: int):
        super().__init__(f"unknown link {name!r}")
        self.name = name
        self.position = position


class LinkTransformer:
    """Parses chain notation and resolves its leaves against bound names."""
    _parser: Optional[Parser] = None

    def __init__(self):
        if LinkTransformer._parser is None:
            LinkTransformer._parser = Parser.from_file(str(GRAMMAR_PATH))
        self.parser = LinkTransformer._parser

    def parse_nodes(self, source: str) -> List[dict]:
        """Returns the leaf nodes of `source` in order, binding first if present."""
        parse_out = self.parser.parse(source)
        if parse_out.get('status') != 'success':
            raise ParseError(parse_out.get('message') or "parse failed")
        return self._leaves(parse_out['ast'])

    def _leaves(self, node: Any) -> List[dict]:
        if isinstance(node, list):
            return [leaf for n in node for leaf in self._leaves(n)]
        if not isinstance(node, dict):
            return []
        if 'children' in node:
            return self._leaves(node['children'])
        return [node]

    def split_binding(self, nodes: List[dict]) -> Tuple[Optional[str], List[dict]]:
        """Separates a leading `name:` target from the chain nodes."""
        if nodes and nodes[0].get('tag') == 'binding':
            name = nodes[0]['text'][:-1]
            if not nodes[1:]:
                raise ParseError(f"binding {name!r} must be followed by a chain", 0)
            return name, nodes[1:]
        return None, nodes

    def transform(self, nodes: List[dict], names: Mapping[str, Any]) -> List[Any]:
        return [self.transform_node(node, i, names) for i, node in enumerate(nodes)]

    def transform_node(self, node: dict, position: int, names: Mapping[str, Any]) -> Any:
        text = node.get('text', '')
        match node.get('tag'):
            case 'string':
                return _ESCAPE.sub(r"\1", text[1:-1])
            case 'varargs':
                count = text[3:]
                if not count.isdigit():
                    raise ParseError(f"VarArgs count must be a non-negative integer, got {count!r}", position)
                return VarArgs(int(count))
            case 'quoted':
                name = text[1:]
                if name not in names:
                    raise UnknownName(name, position)
                return Quoted(names[name])
            case 'flow':
                try:
                    return parse_flow(text)
                except ValueError as e:
                    raise ParseError(str(e), position) from e
            case 'number':
                # koine's number type folds 2.0 into 2, so numbers are typed here
                if re.fullmatch(r"[-+]?\d+", text):
                    return int(text)
                return float(text)
            case 'boolean':
                return node['value']
            case 'nil':
                return None
            case 'name':
                if text not in names:
                    raise UnknownName(text, position)
                return names[text]
            case tag:
                raise ParseError(f"unexpected node {tag!r}", position)
