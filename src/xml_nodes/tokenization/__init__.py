"""Token layer for XML node conversion.

The decoder and encoder only depend on the token vocabulary; this package
also provides a reference token source and sink for XML text.

Key Components:
    Token: Single lexical unit with its type, payload and position
    TokenType: Enumeration of the six token kinds
    MarkupTokenizer: Lazy pull tokenizer over XML text
    MarkupWriter: Sink that serializes tokens back into XML text
"""

from .tokens import (
    Token,
    TokenPosition,
    TokenSink,
    TokenSource,
    TokenType,
)
from .tokenizer import (
    XML_NAMESPACE,
    MarkupTokenizer,
    read_input,
)
from .writer import (
    MarkupWriter,
    escape_attr,
    escape_text,
)

__all__ = [
    "MarkupTokenizer",
    "MarkupWriter",
    "Token",
    "TokenPosition",
    "TokenSink",
    "TokenSource",
    "TokenType",
    "XML_NAMESPACE",
    "escape_attr",
    "escape_text",
    "read_input",
]
