"""
Hierarchical document codec.

Provides a tagged tree representation of parsed JSON/YAML locale documents and
the flatten/unflatten pair used by the diff and merge steps:
- MapNode / StringLeaf / OpaqueLeaf node kinds
- flatten: nested document -> ordered FlatEntry list (string leaves only)
- unflatten: FlatEntry list -> nested document
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, NamedTuple, Tuple, Union


class FlatEntry(NamedTuple):
    """A single leaf string addressed by its dotted path."""
    key: str
    value: str


@dataclass(frozen=True)
class StringLeaf:
    """Translatable leaf."""
    value: str


@dataclass(frozen=True)
class OpaqueLeaf:
    """Leaf passed through untouched (numbers, booleans, null, arrays, empty maps)."""
    value: Any


@dataclass(frozen=True)
class MapNode:
    """String-keyed map, children kept in document order."""
    children: Dict[str, "Node"] = field(default_factory=dict)


Node = Union[MapNode, StringLeaf, OpaqueLeaf]


def to_tree(obj: Any) -> Node:
    """
    Convert a parsed document into a tagged tree.

    Example:
        >>> to_tree({"nav": {"home": "Home"}, "count": 3})
        MapNode(children={'nav': MapNode(children={'home': StringLeaf(value='Home')}), 'count': OpaqueLeaf(value=3)})
    """
    if isinstance(obj, dict):
        return MapNode({str(key): to_tree(value) for key, value in obj.items()})
    if isinstance(obj, str):
        return StringLeaf(obj)
    return OpaqueLeaf(obj)


def from_tree(node: Node) -> Any:
    """Convert a tagged tree back into plain dicts and values."""
    if isinstance(node, MapNode):
        return {key: from_tree(child) for key, child in node.children.items()}
    if isinstance(node, StringLeaf):
        return node.value
    if isinstance(node, OpaqueLeaf):
        return node.value
    raise TypeError(f"Unknown node kind: {type(node).__name__}")


def walk_leaves(node: Node, path: str = "") -> Iterator[Tuple[str, Node]]:
    """
    Yield (dotted_path, leaf) pairs depth-first in document order.

    Empty maps below the root are yielded as opaque leaves so they survive a
    flatten/merge/unflatten cycle.
    """
    if isinstance(node, MapNode):
        if not node.children and path:
            yield path, OpaqueLeaf({})
            return
        for key, child in node.children.items():
            new_path = f"{path}.{key}" if path else key
            yield from walk_leaves(child, new_path)
    elif isinstance(node, (StringLeaf, OpaqueLeaf)):
        if path:
            yield path, node
    else:
        raise TypeError(f"Unknown node kind: {type(node).__name__}")


def flatten(doc: Any) -> List[FlatEntry]:
    """
    Flatten a nested document into dot-notation entries.

    Only string leaves are extracted; arrays and non-string values are skipped.

    Example:
        >>> flatten({"nav": {"home": "Home", "about": "About"}})
        [FlatEntry(key='nav.home', value='Home'), FlatEntry(key='nav.about', value='About')]
    """
    tree = doc if isinstance(doc, (MapNode, StringLeaf, OpaqueLeaf)) else to_tree(doc)
    return [
        FlatEntry(path, leaf.value)
        for path, leaf in walk_leaves(tree)
        if isinstance(leaf, StringLeaf)
    ]


def unflatten(entries: List[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    Rebuild a nested document from (dotted_key, value) pairs.

    Key order follows the entries. When a path segment already holds a
    non-map value it is replaced by a new map (last write wins at that
    segment).

    Example:
        >>> unflatten([("home.title", "Hello")])
        {'home': {'title': 'Hello'}}
    """
    result: Dict[str, Any] = {}

    for path, value in entries:
        keys = path.split('.')
        node = result

        for key in keys[:-1]:
            if not isinstance(node.get(key), dict):
                node[key] = {}
            node = node[key]

        node[keys[-1]] = value

    return result


def flat_map(doc: Any) -> Dict[str, str]:
    """Flattened string leaves of ``doc`` as a dict (empty when doc is None)."""
    if doc is None:
        return {}
    return {entry.key: entry.value for entry in flatten(doc)}
