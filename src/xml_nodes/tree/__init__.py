"""Generic XML document model with markup and JSON codecs.

Key Components:
    Pi, Decl, Comment, Text, Elem: The five node types
    Nodes: Node sequence, also the representation of a whole document
    NodeDecoder: Builds node trees from token streams
    NodeEncoder: Emits token streams from node trees
    json_codec: Tagged-union JSON conversion
"""

from .nodes import (
    Attr,
    Comment,
    Decl,
    Elem,
    Name,
    Node,
    Nodes,
    NodeType,
    Pi,
    Text,
    is_node,
)
from .decoder import (
    NodeDecoder,
    decode,
    decode_token,
)
from .encoder import (
    NodeEncoder,
    encode,
    iter_tokens,
)
from . import json_codec

__all__ = [
    "Attr",
    "Comment",
    "Decl",
    "Elem",
    "Name",
    "Node",
    "NodeDecoder",
    "NodeEncoder",
    "NodeType",
    "Nodes",
    "Pi",
    "Text",
    "decode",
    "decode_token",
    "encode",
    "is_node",
    "iter_tokens",
    "json_codec",
]
