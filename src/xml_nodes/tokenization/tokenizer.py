"""Pull tokenizer that turns XML text into the token vocabulary.

The tokenizer is lazy: each ``next()`` scans just far enough to produce one
token. Namespace prefixes are resolved while scanning, so element names carry
namespace URIs and prefix bindings come through as ordinary attributes:

    <ns:one xmlns:ns="uri" two="three">
    ->
    START_ELEMENT Name("uri", "one")
        [Attr(Name("xmlns", "ns"), "uri"), Attr(Name("", "two"), "three")]
"""

import re
from collections import ChainMap, deque
from typing import BinaryIO, Deque, Dict, List, Optional, TextIO, Tuple, Union

from xml_nodes.shared.config import TokenizerConfig
from xml_nodes.shared.errors import TokenizationError
from xml_nodes.shared.logging import get_logger
from xml_nodes.tree.nodes import Attr, Name

from .tokens import Token, TokenPosition

# Type definitions for input data
InputType = Union[str, bytes, TextIO, BinaryIO]

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XML_PREFIX = "xml"
XMLNS_PREFIX = "xmlns"

PREDEFINED_ENTITIES = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "apos": "'",
    "quot": '"',
}

_NAME_START_CHARS = (
    "A-Za-z_:"
    "\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D\u037F-\u1FFF"
    "\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF\uF900-\uFDCF"
    "\uFDF0-\uFFFD\U00010000-\U000EFFFF"
)
_NAME_CHARS = _NAME_START_CHARS + "\\-.0-9\u00B7\u0300-\u036F\u203F-\u2040"

NAME_PATTERN = re.compile(f"[{_NAME_START_CHARS}][{_NAME_CHARS}]*")
WHITESPACE_PATTERN = re.compile(r"[ \t\n\r]*")
ENTITY_PATTERN = re.compile(r"&([^&;\s<]*)(;?)")
CHAR_REFERENCE_PATTERN = re.compile(r"x([0-9A-Fa-f]+)|([0-9]+)")

# Markup openers, longest first
COMMENT_OPEN = "<!--"
CDATA_OPEN = "<![CDATA["
DIRECTIVE_OPEN = "<!"
PI_OPEN = "<?"
END_TAG_OPEN = "</"


def read_input(source: InputType) -> str:
    """Read markup text from a string, bytes or file-like object.

    Bytes are decoded as UTF-8; a leading byte order mark is dropped.
    """
    if hasattr(source, "read"):
        source = source.read()  # type: ignore[union-attr]
    if isinstance(source, bytes):
        return source.decode("utf-8-sig")
    if isinstance(source, str):
        return source[1:] if source.startswith("\ufeff") else source
    raise TypeError(f"cannot read markup from {type(source).__name__}")


class MarkupTokenizer:
    """Lazy XML tokenizer producing ``Token`` objects in document order.

    In strict mode (the default) malformed input raises ``TokenizationError``
    with the line and column of the problem. Lenient mode keeps unknown
    entities and unbound prefixes literally, accepts mismatched end tags and
    repeated attributes, and treats end of input inside an element as a
    normal end.
    """

    def __init__(
        self,
        source: InputType,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or TokenizerConfig()
        self._logger = get_logger(__name__, correlation_id, "markup_tokenizer")

        text = read_input(source)
        if self.config.normalize_line_endings:
            text = text.replace("\r\n", "\n").replace("\r", "\n")
        self._text = text

        self._pos = 0
        self._line = 1
        self._line_start = 0
        self._pending: Deque[Token] = deque()
        self._open_elements: List[str] = []
        self._scope: ChainMap = ChainMap({})
        self._finished = False
        self.token_count = 0

        self._logger.debug(
            "Tokenizer initialized",
            extra={"char_count": len(text), "strict": self.config.strict},
        )

    def __iter__(self) -> "MarkupTokenizer":
        return self

    def __next__(self) -> Token:
        if self._pending:
            token = self._pending.popleft()
        else:
            token = self._read_token()
        if token is None:
            raise StopIteration
        self.token_count += 1
        return token

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return len(self._open_elements)

    # Position tracking

    def _current_position(self) -> TokenPosition:
        return TokenPosition(self._line, self._pos - self._line_start + 1, self._pos)

    def _position_at(self, offset: int) -> TokenPosition:
        line = self._text.count("\n", 0, offset) + 1
        line_start = self._text.rfind("\n", 0, offset) + 1
        return TokenPosition(line, offset - line_start + 1, offset)

    def _advance(self, new_pos: int) -> None:
        newlines = self._text.count("\n", self._pos, new_pos)
        if newlines:
            self._line += newlines
            self._line_start = self._text.rfind("\n", self._pos, new_pos) + 1
        self._pos = new_pos

    def _error(self, message: str, offset: Optional[int] = None) -> TokenizationError:
        position = self._position_at(self._pos if offset is None else offset)
        return TokenizationError(message, position)

    # Token dispatch

    def _read_token(self) -> Optional[Token]:
        if self._pos >= len(self._text):
            self._finish()
            return None

        position = self._current_position()
        text = self._text
        pos = self._pos

        if not text.startswith("<", pos):
            return self._read_char_data(position)
        if text.startswith(COMMENT_OPEN, pos):
            return self._read_comment(position)
        if text.startswith(CDATA_OPEN, pos):
            return self._read_cdata(position)
        if text.startswith(DIRECTIVE_OPEN, pos):
            return self._read_directive(position)
        if text.startswith(PI_OPEN, pos):
            return self._read_processing_instruction(position)
        if text.startswith(END_TAG_OPEN, pos):
            return self._read_end_tag(position)
        return self._read_start_tag(position)

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True

        if self._open_elements and self.config.strict:
            raise self._error(
                f"unexpected end of input: element <{self._open_elements[-1]}> "
                f"is not closed"
            )

        self._logger.debug(
            "Tokenization completed",
            extra={
                "token_count": self.token_count,
                "unclosed_elements": len(self._open_elements),
            },
        )

    # Individual constructs

    def _read_char_data(self, position: TokenPosition) -> Token:
        end = self._text.find("<", self._pos)
        if end == -1:
            end = len(self._text)
        value = self._unescape(self._text[self._pos:end], self._pos)
        self._advance(end)
        return Token.char_data(value, position)

    def _read_comment(self, position: TokenPosition) -> Token:
        start = self._pos + len(COMMENT_OPEN)
        end = self._text.find("-->", start)
        if end == -1:
            raise self._error("unterminated comment")
        value = self._text[start:end]
        self._advance(end + 3)
        return Token.comment(value, position)

    def _read_cdata(self, position: TokenPosition) -> Token:
        start = self._pos + len(CDATA_OPEN)
        end = self._text.find("]]>", start)
        if end == -1:
            raise self._error("unterminated CDATA section")
        value = self._text[start:end]
        self._advance(end + 3)
        return Token.char_data(value, position)

    def _read_directive(self, position: TokenPosition) -> Token:
        text = self._text
        start = self._pos + len(DIRECTIVE_OPEN)
        depth = 0
        quote: Optional[str] = None
        i = start
        while i < len(text):
            char = text[i]
            if quote:
                if char == quote:
                    quote = None
            elif char in "\"'":
                quote = char
            elif text.startswith(COMMENT_OPEN, i):
                comment_end = text.find("-->", i + len(COMMENT_OPEN))
                if comment_end == -1:
                    break
                i = comment_end + 3
                continue
            elif char == "<":
                depth += 1
            elif char == ">":
                if depth == 0:
                    value = text[start:i]
                    self._advance(i + 1)
                    return Token.directive(value, position)
                depth -= 1
            i += 1
        raise self._error("unterminated declaration")

    def _read_processing_instruction(self, position: TokenPosition) -> Token:
        start = self._pos + len(PI_OPEN)
        end = self._text.find("?>", start)
        if end == -1:
            raise self._error("unterminated processing instruction")

        body = self._text[start:end]
        match = NAME_PATTERN.match(body)
        if match is None:
            raise self._error("expected target name after <?")
        target = match.group()
        content = body[match.end():]
        if content and content[0] not in " \t\n\r":
            raise self._error(f"invalid processing instruction target {target!r}")

        self._advance(end + 2)
        return Token.processing_instruction(target, content.lstrip(" \t\n\r"), position)

    def _read_end_tag(self, position: TokenPosition) -> Token:
        text = self._text
        match = NAME_PATTERN.match(text, self._pos + len(END_TAG_OPEN))
        if match is None:
            raise self._error("expected element name after </")
        qname = match.group()
        close = WHITESPACE_PATTERN.match(text, match.end()).end()
        if not text.startswith(">", close):
            raise self._error(f"invalid characters in end tag </{qname}>", close)

        name = self._translate(qname, is_attr=False)
        if not self._open_elements:
            if self.config.strict:
                raise self._error(f"unexpected end element </{qname}>")
        else:
            expected = self._open_elements[-1]
            if expected != qname and self.config.strict:
                raise self._error(f"element <{expected}> closed by </{qname}>")
            self._close_element()

        self._advance(close + 1)
        return Token.end_element(name, position)

    def _read_start_tag(self, position: TokenPosition) -> Token:
        text = self._text
        match = NAME_PATTERN.match(text, self._pos + 1)
        if match is None:
            raise self._error("expected element name after <")
        qname = match.group()

        raw_attrs: List[Tuple[str, str]] = []
        i = match.end()
        while True:
            j = WHITESPACE_PATTERN.match(text, i).end()
            if j >= len(text):
                raise self._error(f"unexpected end of input in tag <{qname}>", j)
            if text.startswith("/>", j):
                self_closing = True
                end = j + 2
                break
            if text.startswith(">", j):
                self_closing = False
                end = j + 1
                break
            if j == i:
                raise self._error(f"expected whitespace before attribute in <{qname}>", j)
            attr_name, value, i = self._read_attribute(qname, j)
            if self.config.strict and any(seen == attr_name for seen, _ in raw_attrs):
                raise self._error(
                    f"duplicate attribute {attr_name!r} in element <{qname}>", j
                )
            raw_attrs.append((attr_name, value))

        self._open_element(qname, raw_attrs)
        name = self._translate(qname, is_attr=False)
        attrs = tuple(
            Attr(self._translate(attr_name, is_attr=True), value)
            for attr_name, value in raw_attrs
        )

        if self_closing:
            self._pending.append(Token.end_element(name, position))
            self._close_element()

        self._advance(end)
        return Token.start_element(name, attrs, position)

    def _read_attribute(self, qname: str, start: int) -> Tuple[str, str, int]:
        text = self._text
        match = NAME_PATTERN.match(text, start)
        if match is None:
            raise self._error(f"expected attribute name in element <{qname}>", start)
        attr_name = match.group()

        i = WHITESPACE_PATTERN.match(text, match.end()).end()
        if not text.startswith("=", i):
            raise self._error(f"attribute {attr_name!r} has no value", i)
        i = WHITESPACE_PATTERN.match(text, i + 1).end()
        quote = text[i:i + 1]
        if quote not in ('"', "'"):
            raise self._error(f"unquoted value for attribute {attr_name!r}", i)

        close = text.find(quote, i + 1)
        if close == -1:
            raise self._error(f"unterminated value for attribute {attr_name!r}", i)
        raw_value = text[i + 1:close]
        if "<" in raw_value:
            raise self._error(f"unescaped < in value of attribute {attr_name!r}", i)
        return attr_name, self._unescape(raw_value, i + 1), close + 1

    # Namespace scoping

    def _open_element(self, qname: str, raw_attrs: List[Tuple[str, str]]) -> None:
        bindings: Dict[str, str] = {}
        for attr_name, value in raw_attrs:
            if attr_name == XMLNS_PREFIX:
                bindings[""] = value
            elif attr_name.startswith(XMLNS_PREFIX + ":"):
                bindings[attr_name[len(XMLNS_PREFIX) + 1:]] = value
        self._scope = self._scope.new_child(bindings)
        self._open_elements.append(qname)

    def _close_element(self) -> None:
        self._open_elements.pop()
        self._scope = self._scope.parents

    def _translate(self, qname: str, is_attr: bool) -> Name:
        prefix, sep, local = qname.partition(":")
        if not sep:
            if is_attr:
                return Name("", qname)
            return Name(self._scope.get("", ""), qname)

        if not prefix or not local:
            if self.config.strict:
                raise self._error(f"malformed qualified name {qname!r}")
            return Name("", qname)
        if prefix == XMLNS_PREFIX:
            return Name(XMLNS_PREFIX, local)
        if prefix == XML_PREFIX:
            return Name(XML_NAMESPACE, local)

        space = self._scope.get(prefix)
        if space is None:
            if self.config.strict:
                raise self._error(f"undeclared namespace prefix {prefix!r}")
            space = prefix
        return Name(space, local)

    # Entities

    def _unescape(self, raw: str, offset: int) -> str:
        if "&" not in raw:
            return raw
        parts: List[str] = []
        pos = 0
        for match in ENTITY_PATTERN.finditer(raw):
            parts.append(raw[pos:match.start()])
            parts.append(self._resolve_entity(match, offset + match.start()))
            pos = match.end()
        parts.append(raw[pos:])
        return "".join(parts)

    def _resolve_entity(self, match: "re.Match[str]", offset: int) -> str:
        name, semicolon = match.groups()
        resolved: Optional[str] = None
        if semicolon and name:
            if name in PREDEFINED_ENTITIES:
                resolved = PREDEFINED_ENTITIES[name]
            elif name.startswith("#"):
                resolved = _char_reference(name[1:])

        if resolved is not None:
            return resolved
        if self.config.strict:
            raise self._error(f"invalid character entity {match.group()!r}", offset)
        return match.group()


def _char_reference(digits: str) -> Optional[str]:
    match = CHAR_REFERENCE_PATTERN.fullmatch(digits)
    if match is None:
        return None
    hex_digits, decimal_digits = match.groups()
    try:
        if hex_digits:
            return chr(int(hex_digits, 16))
        return chr(int(decimal_digits, 10))
    except (OverflowError, ValueError):
        return None
