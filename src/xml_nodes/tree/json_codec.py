"""Tagged-union JSON representation of node trees.

XML <-> JSON:

    <?xml version="1.0"?>
    <one two="three">four</one>

    <->

    [
      {"type": "pi", "target": "xml", "content": "version=\\"1.0\\""},
      {"type": "text", "content": "\\n"},
      {
        "type": "elem",
        "name": {"local": "one"},
        "attrs": [{"name": {"local": "two"}, "value": "three"}],
        "nodes": [{"type": "text", "content": "four"}]
      }
    ]

Empty strings and empty lists are left out of the output; on input they may
be present, absent or null. Unknown fields are ignored. Conversion is exact
in both directions: ``from_data(to_data(x)) == x`` for every tree, at any
nesting depth. Only the ``json`` module itself recurses, so ``dumps`` and
``loads`` report trees too deep for it with ``JsonDepthError``.
"""

import json
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from xml_nodes.shared.config import JsonConfig
from xml_nodes.shared.errors import (
    JsonDepthError,
    JsonMissingDiscriminatorError,
    JsonShapeError,
    JsonUnknownDiscriminatorError,
)
from xml_nodes.shared.logging import get_logger

from .nodes import Attr, Comment, Decl, Elem, Name, Node, Nodes, NodeType, Pi, Text, is_node

logger = get_logger(__name__, component="json_codec")

JsonValue = Union[Dict[str, Any], List[Any]]


# Encoding

_EXHAUSTED = object()


def _name_to_data(name: Name) -> Dict[str, str]:
    data: Dict[str, str] = {}
    if name.space:
        data["space"] = name.space
    if name.local:
        data["local"] = name.local
    return data


def _attr_to_data(attr: Attr) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    name = _name_to_data(attr.name)
    if name:
        data["name"] = name
    if attr.value:
        data["value"] = attr.value
    return data


def _node_fields(node: Node) -> Dict[str, Any]:
    # Everything except the children of an element
    if not is_node(node):
        raise TypeError(f"cannot convert {type(node).__name__} to a JSON node")

    data: Dict[str, Any] = {"type": node.node_type.value}
    if isinstance(node, Pi):
        if node.target:
            data["target"] = node.target
        if node.content:
            data["content"] = node.content
    elif isinstance(node, Elem):
        name = _name_to_data(node.name)
        if name:
            data["name"] = name
        if node.attrs:
            data["attrs"] = [_attr_to_data(attr) for attr in node.attrs]
    elif node.content:
        data["content"] = node.content
    return data


def node_to_data(node: Node) -> Dict[str, Any]:
    """Convert one node into its tagged JSON object.

    Children are converted with an explicit stack, so nesting depth is not
    limited by the Python call stack.
    """
    data = _node_fields(node)
    pending = [(node, data)]
    while pending:
        current, current_data = pending.pop()
        if isinstance(current, Elem) and current.nodes:
            children = [_node_fields(child) for child in current.nodes]
            current_data["nodes"] = children
            pending.extend(zip(current.nodes, children))
    return data


def to_data(value: Union[Node, Iterable[Node]]) -> JsonValue:
    """Convert a node to a JSON object, or a node sequence to a JSON array."""
    if is_node(value):
        return node_to_data(value)  # type: ignore[arg-type]
    return [node_to_data(node) for node in value]  # type: ignore[union-attr]


def _data_depth(data: JsonValue) -> int:
    """Element nesting depth of converted data."""
    items = [data] if isinstance(data, dict) else data
    depth = 0
    pending = [(item, 1) for item in items if item["type"] == NodeType.ELEM.value]
    while pending:
        item, level = pending.pop()
        depth = max(depth, level)
        pending.extend(
            (child, level + 1)
            for child in item.get("nodes", ())
            if child["type"] == NodeType.ELEM.value
        )
    return depth


def dumps(
    value: Union[Node, Iterable[Node]], config: Optional[JsonConfig] = None
) -> str:
    """Serialize a node or node sequence as tagged JSON text.

    The default format is two-space indentation with non-ASCII characters
    written as-is and no trailing newline. ``JsonConfig(indent=None)`` gives
    compact output.

    Raises:
        JsonDepthError: The tree is nested deeper than ``json`` can serialize
    """
    config = config or JsonConfig()
    separators = (",", ":") if config.indent is None else (",", ": ")
    data = to_data(value)
    try:
        text = json.dumps(
            data,
            indent=config.indent,
            ensure_ascii=config.ensure_ascii,
            separators=separators,
        )
    except RecursionError:
        raise JsonDepthError(_data_depth(data)) from None
    logger.debug("JSON encoding completed", extra={"char_count": len(text)})
    return text


# Decoding

def _raw(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _string_field(data: Dict[str, Any], key: str, owner: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise JsonShapeError(
            f"field {key!r} of {owner} must be a string, got {_raw(value)}"
        )
    return value


def _list_field(data: Dict[str, Any], key: str, owner: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise JsonShapeError(
            f"field {key!r} of {owner} must be an array, got {_raw(value)}"
        )
    return value


def _object(value: Any, owner: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise JsonShapeError(f"{owner} must be an object, got {_raw(value)}")
    return value


def _name_from_data(value: Any) -> Name:
    if value is None:
        return Name()
    data = _object(value, "name")
    return Name(_string_field(data, "space", "name"), _string_field(data, "local", "name"))


def _attr_from_data(value: Any) -> Attr:
    data = _object(value, "attribute")
    return Attr(_name_from_data(data.get("name")), _string_field(data, "value", "attribute"))


def _discriminate(value: Any) -> Tuple[NodeType, Dict[str, Any]]:
    data = _object(value, "node")

    type_value = data.get("type")
    if type_value is None or type_value == "":
        raise JsonMissingDiscriminatorError(_raw(data))
    if not isinstance(type_value, str):
        raise JsonShapeError(f'field "type" must be a string, got {_raw(type_value)}')
    try:
        return NodeType(type_value), data
    except ValueError:
        raise JsonUnknownDiscriminatorError(type_value) from None


def _leaf_from_data(node_type: NodeType, data: Dict[str, Any]) -> Node:
    owner = f"{node_type.value} node"
    if node_type is NodeType.PI:
        return Pi(
            _string_field(data, "target", owner),
            _string_field(data, "content", owner),
        )
    if node_type is NodeType.DECL:
        return Decl(_string_field(data, "content", owner))
    if node_type is NodeType.COMMENT:
        return Comment(_string_field(data, "content", owner))
    return Text(_string_field(data, "content", owner))


def _nodes_from_data(items: List[Any]) -> Nodes:
    # Each frame: remaining items, nodes decoded so far, and the name and
    # attributes of the element they belong to (None at the top level)
    top: List[Node] = []
    stack: List[Tuple[Iterator[Any], List[Node], Optional[Tuple[Name, Tuple[Attr, ...]]]]] = [
        (iter(items), top, None)
    ]
    while stack:
        remaining, nodes, elem_header = stack[-1]
        item = next(remaining, _EXHAUSTED)
        if item is _EXHAUSTED:
            stack.pop()
            if elem_header is not None:
                name, attrs = elem_header
                stack[-1][1].append(Elem(name, attrs, tuple(nodes)))
            continue

        node_type, data = _discriminate(item)
        if node_type is NodeType.ELEM:
            owner = "elem node"
            header = (
                _name_from_data(data.get("name")),
                tuple(_attr_from_data(attr) for attr in _list_field(data, "attrs", owner)),
            )
            stack.append((iter(_list_field(data, "nodes", owner)), [], header))
        else:
            nodes.append(_leaf_from_data(node_type, data))
    return tuple(top)


def node_from_data(value: Any) -> Node:
    """Convert one tagged JSON object into a node.

    Raises:
        JsonMissingDiscriminatorError: The object has no "type" field
        JsonUnknownDiscriminatorError: The "type" field names no node type
        JsonShapeError: The value or one of its fields has the wrong shape
    """
    return _nodes_from_data([value])[0]


def from_data(value: Any) -> Nodes:
    """Convert a JSON array of tagged objects into a node sequence.

    ``None`` is accepted as the empty sequence.
    """
    if value is None:
        return ()
    if not isinstance(value, list):
        raise JsonShapeError(f"node sequence must be an array, got {_raw(value)}")
    return _nodes_from_data(value)


def _parse(text: Union[str, bytes]) -> Any:
    try:
        return json.loads(text)
    except RecursionError:
        raise JsonDepthError() from None


def loads(text: Union[str, bytes]) -> Nodes:
    """Parse tagged JSON text holding an array of nodes.

    Malformed JSON text raises ``json.JSONDecodeError`` unchanged; text
    nested deeper than ``json`` can parse raises ``JsonDepthError``.
    """
    nodes = from_data(_parse(text))
    logger.debug("JSON decoding completed", extra={"node_count": len(nodes)})
    return nodes


def loads_node(text: Union[str, bytes]) -> Node:
    """Parse tagged JSON text holding a single node object."""
    return node_from_data(_parse(text))
