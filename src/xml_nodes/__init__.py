"""XML Nodes.

A generic, information-preserving model of arbitrary XML documents that
decodes from tokens, re-encodes as equivalent XML and converts losslessly to
and from a tagged JSON form.

Progressive API Disclosure:
- Level 1: Simple functions - parse_string(), parse_file(), to_markup(), to_json(), from_json()
- Level 2: Codec classes - NodeDecoder, NodeEncoder, json_codec, with CodecConfig
- Level 3: Token layer - MarkupTokenizer, MarkupWriter and custom token sources or sinks
"""

__version__ = "0.1.0"
__author__ = "XML Nodes Team"

# The node model is imported first; the token layer depends on it
from .tree import (
    Attr,
    Comment,
    Decl,
    Elem,
    Name,
    Node,
    NodeDecoder,
    NodeEncoder,
    Nodes,
    NodeType,
    Pi,
    Text,
    decode,
    decode_token,
    encode,
    json_codec,
)
from .tokenization import MarkupTokenizer, MarkupWriter, Token, TokenType
from .shared.config import CodecConfig, DecoderConfig, JsonConfig, TokenizerConfig
from .shared.errors import (
    DecodeError,
    DecodeTokenError,
    DepthLimitError,
    EncodeError,
    EncodeNameError,
    JsonCodecError,
    JsonDepthError,
    JsonMissingDiscriminatorError,
    JsonShapeError,
    JsonUnknownDiscriminatorError,
    MarkupWriteError,
    TokenizationError,
    XMLNodesError,
)

# Level 1: simple conversion functions
from .api import (
    from_json,
    json_to_markup,
    markup_to_json,
    parse_file,
    parse_string,
    to_json,
    to_markup,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: simple conversion functions
    "parse_string",
    "parse_file",
    "to_markup",
    "to_json",
    "from_json",
    "markup_to_json",
    "json_to_markup",

    # Node model
    "Attr",
    "Comment",
    "Decl",
    "Elem",
    "Name",
    "Node",
    "NodeType",
    "Nodes",
    "Pi",
    "Text",

    # Level 2: codecs and configuration
    "NodeDecoder",
    "NodeEncoder",
    "decode",
    "decode_token",
    "encode",
    "json_codec",
    "CodecConfig",
    "DecoderConfig",
    "JsonConfig",
    "TokenizerConfig",

    # Level 3: token layer
    "MarkupTokenizer",
    "MarkupWriter",
    "Token",
    "TokenType",

    # Errors
    "DecodeError",
    "DecodeTokenError",
    "DepthLimitError",
    "EncodeError",
    "EncodeNameError",
    "JsonCodecError",
    "JsonDepthError",
    "JsonMissingDiscriminatorError",
    "JsonShapeError",
    "JsonUnknownDiscriminatorError",
    "MarkupWriteError",
    "TokenizationError",
    "XMLNodesError",
]
