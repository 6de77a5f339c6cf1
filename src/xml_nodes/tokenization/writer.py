"""Token sink that serializes tokens back into XML text.

The writer owns escaping and prefix selection. It never pretty-prints and
never self-closes elements: every start tag gets an explicit end tag.
"""

import io
import re
from collections import ChainMap
from typing import Dict, List, Optional, TextIO, Tuple

from xml_nodes.shared.errors import MarkupWriteError
from xml_nodes.shared.logging import get_logger
from xml_nodes.tree.nodes import Attr, Name

from .tokenizer import NAME_PATTERN, XML_NAMESPACE, XML_PREFIX, XMLNS_PREFIX
from .tokens import Token, TokenType

FALLBACK_PREFIX = "_"

_TEXT_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\r": "&#xD;",
}
_ATTR_ESCAPES = dict(
    _TEXT_ESCAPES,
    **{
        '"': "&quot;",
        "\t": "&#x9;",
        "\n": "&#xA;",
    }
)
_TEXT_ESCAPE_PATTERN = re.compile("[&<>\r]")
_ATTR_ESCAPE_PATTERN = re.compile("[&<>\r\"\t\n]")


def escape_text(value: str) -> str:
    """Escape character data for use between tags."""
    return _TEXT_ESCAPE_PATTERN.sub(lambda m: _TEXT_ESCAPES[m.group()], value)


def escape_attr(value: str) -> str:
    """Escape an attribute value for use inside double quotes."""
    return _ATTR_ESCAPE_PATTERN.sub(lambda m: _ATTR_ESCAPES[m.group()], value)


class _ElementFrame:
    """Start tag state needed to close one open element."""

    def __init__(self, name: Name, qname: str, default: str) -> None:
        self.name = name
        self.qname = qname
        # Default namespace in effect inside the element
        self.default = default


class MarkupWriter:
    """Serializes a token stream into XML text.

    Element names with a namespace are written unprefixed together with a
    default ``xmlns`` declaration, unless the tag declares a different default
    itself, in which case a prefix is used. An element without a namespace
    inside a non-empty default gets ``xmlns=""``. Attributes in a namespace
    are written with a prefix: ``xmlns`` and ``xml`` use their reserved
    spellings, a prefix bound by a literal ``xmlns:p`` attribute in scope is
    reused, and any other namespace gets a generated prefix declared on the
    same start tag.

    Args:
        out: Text stream to write to; an internal buffer is used when omitted
        correlation_id: Optional correlation ID for tracking one conversion
    """

    def __init__(
        self, out: Optional[TextIO] = None, correlation_id: Optional[str] = None
    ) -> None:
        self._out: TextIO = out if out is not None else io.StringIO()
        self._logger = get_logger(__name__, correlation_id, "markup_writer")
        self._stack: List[_ElementFrame] = []
        # Prefix to namespace bindings, one map per open element
        self._scope: ChainMap = ChainMap({})
        self._seq = 0
        self.token_count = 0

    def getvalue(self) -> str:
        """Return everything written so far when using the internal buffer."""
        if not isinstance(self._out, io.StringIO):
            raise MarkupWriteError("getvalue() requires the internal buffer")
        return self._out.getvalue()

    @property
    def depth(self) -> int:
        return len(self._stack)

    def write_token(self, token: Token) -> None:
        """Serialize a single token."""
        if token.type is TokenType.START_ELEMENT:
            self._write_start(token.name, token.attrs)
        elif token.type is TokenType.END_ELEMENT:
            self._write_end(token.name)
        elif token.type is TokenType.CHAR_DATA:
            self._out.write(escape_text(token.value))
        elif token.type is TokenType.COMMENT:
            if "--" in token.value or token.value.endswith("-"):
                raise MarkupWriteError('comments must not contain "--"')
            self._out.write(f"<!--{token.value}-->")
        elif token.type is TokenType.PROCESSING_INSTRUCTION:
            self._write_processing_instruction(token.target, token.value)
        elif token.type is TokenType.DIRECTIVE:
            if not _balanced_directive(token.value):
                raise MarkupWriteError("unbalanced brackets or quotes in declaration")
            self._out.write(f"<!{token.value}>")
        else:
            raise MarkupWriteError(f"cannot write token {token!r}")
        self.token_count += 1

    def close(self) -> None:
        """Check that every start tag has been closed."""
        if self._stack:
            raise MarkupWriteError(f"unclosed tag <{self._stack[-1].qname}>")
        self._logger.debug("Writer closed", extra={"token_count": self.token_count})

    def _write_processing_instruction(self, target: str, content: str) -> None:
        if not target:
            raise MarkupWriteError("processing instruction has empty target")
        if "?>" in content:
            raise MarkupWriteError('processing instruction content must not contain "?>"')
        if content:
            self._out.write(f"<?{target} {content}?>")
        else:
            self._out.write(f"<?{target}?>")

    def _write_start(self, name: Name, attrs: Tuple[Attr, ...]) -> None:
        if not name.local:
            raise MarkupWriteError("start tag with empty name")

        # Literal declarations on the tag take effect before any prefix is chosen
        literal_default: Optional[str] = None
        bindings: Dict[str, str] = {}
        for attr in attrs:
            if not attr.name.space and attr.name.local == XMLNS_PREFIX:
                literal_default = attr.value
            elif attr.name.space == XMLNS_PREFIX and attr.name.local and attr.value:
                bindings[attr.name.local] = attr.value
        inherited = self._stack[-1].default if self._stack else ""
        self._scope = self._scope.new_child(bindings)

        declarations: List[str] = []
        qname = name.local
        if literal_default is not None:
            default = literal_default
            if name.space and name.space != literal_default:
                qname = f"{self._prefix(name.space, declarations)}:{name.local}"
        elif name.space:
            default = name.space
            declarations.append(f' xmlns="{escape_attr(name.space)}"')
        else:
            default = ""
            if inherited:
                declarations.append(' xmlns=""')

        self._stack.append(_ElementFrame(name, qname, default))

        parts = [f"<{qname}"]
        parts.extend(declarations)
        for attr in attrs:
            if not attr.name.local:
                continue
            if attr.name.space:
                prefix = self._attr_prefix(attr.name.space, parts)
                attr_qname = f"{prefix}:{attr.name.local}"
            else:
                attr_qname = attr.name.local
            parts.append(f' {attr_qname}="{escape_attr(attr.value)}"')
        parts.append(">")
        self._out.write("".join(parts))

    def _write_end(self, name: Name) -> None:
        if not name.local:
            raise MarkupWriteError("end tag with empty name")
        if not self._stack:
            raise MarkupWriteError(f"end tag </{name.local}> without start tag")
        frame = self._stack.pop()
        if frame.name.local != name.local:
            raise MarkupWriteError(
                f"end tag </{name.local}> does not match start tag <{frame.name.local}>"
            )
        if frame.name.space != name.space:
            raise MarkupWriteError(
                f"end tag </{name.local}> in namespace {name.space!r} does not "
                f"match start tag <{frame.name.local}> in namespace {frame.name.space!r}"
            )
        self._scope = self._scope.parents
        self._out.write(f"</{frame.qname}>")

    def _attr_prefix(self, space: str, parts: List[str]) -> str:
        if space == XMLNS_PREFIX:
            return XMLNS_PREFIX
        return self._prefix(space, parts)

    def _prefix(self, space: str, parts: List[str]) -> str:
        if space == XML_NAMESPACE:
            return XML_PREFIX
        bound = self._bound_prefix(space)
        if bound is not None:
            return bound

        # Use the last path segment of the namespace when it is a valid name
        prefix = space.rstrip("/").rsplit("/", 1)[-1]
        match = NAME_PATTERN.fullmatch(prefix)
        if match is None or ":" in prefix:
            prefix = FALLBACK_PREFIX
        if prefix[:3].lower() == XML_PREFIX:
            prefix = FALLBACK_PREFIX + prefix
        if prefix in self._scope:
            while True:
                self._seq += 1
                candidate = f"{prefix}_{self._seq}"
                if candidate not in self._scope:
                    prefix = candidate
                    break

        self._scope.maps[0][prefix] = space
        parts.append(f' xmlns:{prefix}="{escape_attr(space)}"')
        return prefix

    def _bound_prefix(self, space: str) -> Optional[str]:
        # Innermost binding wins; skip prefixes an inner element rebinds
        for bindings in self._scope.maps:
            for prefix, bound in bindings.items():
                if bound == space and self._scope[prefix] == space:
                    return prefix
        return None


def _balanced_directive(value: str) -> bool:
    depth = 0
    quote: Optional[str] = None
    i = 0
    while i < len(value):
        char = value[i]
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif value.startswith("<!--", i):
            end = value.find("-->", i + 4)
            if end == -1:
                return False
            i = end + 3
            continue
        elif char == "<":
            depth += 1
        elif char == ">":
            depth -= 1
            if depth < 0:
                return False
        i += 1
    return depth == 0 and quote is None
