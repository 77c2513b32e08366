from __future__ import annotations

import json
from typing import Any, List
import collections.abc

import pystache
import yaml

from ostrich.ostrich_datatypes import Quoted, VarArgs, is_callable_link


# --------------------------
# Helpers
# --------------------------

def _to_builtin(obj: Any) -> Any:
    # Reduce results to what json/yaml can represent; callables and markers become text
    if isinstance(obj, (list, tuple)):
        return [_to_builtin(x) for x in obj]
    if isinstance(obj, collections.abc.Mapping):
        return {str(k): _to_builtin(v) for k, v in obj.items()}
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, (VarArgs, Quoted)) or is_callable_link(obj):
        from ostrich.ostrich_printer import Printer
        return Printer().pformat(obj)
    return repr(obj)


# --------------------------
# Public API
# --------------------------

def parse_flow(text: str) -> Any:
    """
    Reads a flow-style list or map such as `[1, 2]` or `{a: 1}` with YAML.
    Items are typed by YAML 1.1 rules, so `yes`, `on` and `off` inside a
    collection read as booleans; quote them to keep text.
    """
    try:
        value = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"invalid flow collection {text!r}: {e}") from e
    if not isinstance(value, (list, dict)):
        raise ValueError(f"expected a flow list or map, got {text!r}")
    return value


def serialize(values: List[Any], *, fmt: str, pretty: bool = True) -> str:
    """
    Convert a build's result values into text.
    - fmt: 'json' | 'yaml'
    """
    f = (fmt or '').lower()
    built = _to_builtin(list(values))
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


def render_template(template: str, values: List[Any]) -> str:
    """
    Render results through a mustache template. The context exposes
    `values` (the list), `first` (the first value or empty) and `count`.
    """
    built = _to_builtin(list(values))
    context = {
        'values': built,
        'first': built[0] if built else '',
        'count': len(built),
    }
    renderer = pystache.Renderer(escape=lambda u: u)
    return renderer.render(template, context)


__all__ = [
    "parse_flow",
    "serialize",
    "render_template",
]
