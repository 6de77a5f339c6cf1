"""Generic document model for arbitrary XML.

A document is a ``Nodes`` sequence: a tuple of nodes, each one of ``Pi``,
``Decl``, ``Comment``, ``Text`` or ``Elem``. Top-level instructions and
declarations such as ``<?xml?>`` and ``<!DOCTYPE>`` are kept, so nothing a
document-only model would discard is lost.

Nodes are frozen dataclasses. Sequence fields accept any iterable and are
stored as tuples, which gives structural equality for round-trip checks and
makes trees safe to share once built. Nodes hold no parent references.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Tuple, Union


class NodeType(str, Enum):
    """Discriminators of the node union, as used on the JSON wire."""

    PI = "pi"
    DECL = "decl"
    COMMENT = "comment"
    TEXT = "text"
    ELEM = "elem"


@dataclass(frozen=True)
class Name:
    """XML name split into namespace URI and local part.

    <one:two xmlns:one="three"/> has the name Name(space="three", local="two").
    """

    space: str = ""
    local: str = ""


@dataclass(frozen=True)
class Attr:
    """XML attribute. Namespace bindings are ordinary attributes too:
    ``xmlns="uri"`` is Name("", "xmlns") and ``xmlns:p="uri"`` is
    Name("xmlns", "p").
    """

    name: Name = field(default_factory=Name)
    value: str = ""


@dataclass(frozen=True)
class Pi:
    """Processing instruction such as ``<?xml version="1.0"?>``.

    The content is raw instruction text and is not parsed into attributes.
    """

    node_type: ClassVar[NodeType] = NodeType.PI

    target: str = ""
    content: str = ""


@dataclass(frozen=True)
class Decl:
    """Declaration such as ``<!DOCTYPE html>``, stored without ``<!`` and ``>``."""

    node_type: ClassVar[NodeType] = NodeType.DECL

    content: str = ""


@dataclass(frozen=True)
class Comment:
    node_type: ClassVar[NodeType] = NodeType.COMMENT

    content: str = ""


@dataclass(frozen=True)
class Text:
    """Character data. Adjacent text nodes are not merged."""

    node_type: ClassVar[NodeType] = NodeType.TEXT

    content: str = ""


@dataclass(frozen=True)
class Elem:
    """Arbitrary XML element with its attributes and child nodes in order."""

    node_type: ClassVar[NodeType] = NodeType.ELEM

    name: Name = field(default_factory=Name)
    attrs: Tuple[Attr, ...] = ()
    nodes: Tuple["Node", ...] = ()

    def __post_init__(self) -> None:
        """Freeze sequence fields into tuples."""
        if not isinstance(self.attrs, tuple):
            object.__setattr__(self, "attrs", tuple(self.attrs))
        if not isinstance(self.nodes, tuple):
            object.__setattr__(self, "nodes", tuple(self.nodes))

    def has_exact_attr(self, space: str, local: str, value: str) -> bool:
        """Check for an attribute with exactly this name and value."""
        for attr in self.attrs:
            if (
                attr.name.space == space
                and attr.name.local == local
                and attr.value == value
            ):
                return True
        return False


Node = Union[Pi, Decl, Comment, Text, Elem]
Nodes = Tuple[Node, ...]

NODE_CLASSES: Tuple[type, ...] = (Pi, Decl, Comment, Text, Elem)


def is_node(value: object) -> bool:
    """Check whether ``value`` is one of the five node types."""
    return isinstance(value, NODE_CLASSES)
