"""Token vocabulary shared by token sources, the decoder, the encoder and sinks.

A token source is any iterator of ``Token``; running out of tokens is the
clean end-of-stream signal. A sink is any object with ``write_token``.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, Optional, Protocol, Tuple

from xml_nodes.tree.nodes import Attr, Name


class TokenType(Enum):
    """Lexical units of an XML document."""

    START_ELEMENT = auto()           # <name attr="value">
    END_ELEMENT = auto()             # </name>
    CHAR_DATA = auto()               # Text and CDATA content
    COMMENT = auto()                 # <!-- ... -->
    PROCESSING_INSTRUCTION = auto()  # <?target content?>
    DIRECTIVE = auto()               # <!DOCTYPE ...> and other declarations


@dataclass(frozen=True)
class TokenPosition:
    """Position information for XML tokens."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


@dataclass(frozen=True)
class Token:
    """A single XML token.

    Which fields are meaningful depends on ``type``: ``name`` for start and
    end elements, ``attrs`` for start elements, ``target`` for processing
    instructions, and ``value`` for everything except element boundaries.
    """

    type: TokenType
    name: Name = Name()
    attrs: Tuple[Attr, ...] = ()
    value: str = ""
    target: str = ""
    position: Optional[TokenPosition] = None

    @classmethod
    def start_element(
        cls,
        name: Name,
        attrs: Iterable[Attr] = (),
        position: Optional[TokenPosition] = None,
    ) -> "Token":
        return cls(TokenType.START_ELEMENT, name=name, attrs=tuple(attrs),
                   position=position)

    @classmethod
    def end_element(
        cls, name: Name, position: Optional[TokenPosition] = None
    ) -> "Token":
        return cls(TokenType.END_ELEMENT, name=name, position=position)

    @classmethod
    def char_data(
        cls, value: str, position: Optional[TokenPosition] = None
    ) -> "Token":
        return cls(TokenType.CHAR_DATA, value=value, position=position)

    @classmethod
    def comment(
        cls, value: str, position: Optional[TokenPosition] = None
    ) -> "Token":
        return cls(TokenType.COMMENT, value=value, position=position)

    @classmethod
    def processing_instruction(
        cls, target: str, value: str, position: Optional[TokenPosition] = None
    ) -> "Token":
        return cls(TokenType.PROCESSING_INSTRUCTION, target=target, value=value,
                   position=position)

    @classmethod
    def directive(
        cls, value: str, position: Optional[TokenPosition] = None
    ) -> "Token":
        return cls(TokenType.DIRECTIVE, value=value, position=position)


TokenSource = Iterator[Token]


class TokenSink(Protocol):
    """Receiver of tokens emitted by the encoder."""

    def write_token(self, token: Token) -> None:
        ...
