"""High-level conversion API for XML node trees.

Exposes string/file conversions between XML, node trees and tagged JSON, and
the lxml integration adapter.
"""

from .adapters import decode_lxml, iter_lxml_tokens
from .codec import (
    from_json,
    json_to_markup,
    markup_to_json,
    parse_file,
    parse_string,
    to_json,
    to_markup,
)

__all__ = [
    "decode_lxml",
    "from_json",
    "iter_lxml_tokens",
    "json_to_markup",
    "markup_to_json",
    "parse_file",
    "parse_string",
    "to_json",
    "to_markup",
]
