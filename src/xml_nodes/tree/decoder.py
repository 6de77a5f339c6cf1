"""Token-to-tree decoding.

Turns any token source into a ``Nodes`` document. Token kinds map onto node
types one to one; a start element consumes every token up to its matching end
element and becomes an ``Elem`` with the nodes in between as children.

Open elements are tracked on an explicit stack rather than the Python call
stack, so nesting depth is limited only by memory unless a ``max_depth`` is
configured.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from xml_nodes.shared.config import DecoderConfig
from xml_nodes.shared.errors import DecodeTokenError, DepthLimitError
from xml_nodes.shared.logging import get_logger
from xml_nodes.tokenization.tokens import Token, TokenType

from .nodes import Attr, Comment, Decl, Elem, Name, Node, Nodes, Pi, Text


@dataclass
class _OpenElement:
    """Element whose children are still being decoded."""

    name: Name
    attrs: Tuple[Attr, ...]
    nodes: List[Node] = field(default_factory=list)

    def close(self) -> Elem:
        return Elem(self.name, self.attrs, tuple(self.nodes))


class NodeDecoder:
    """Builds node trees from token streams.

    The decoder only interprets tokens; reading and lexing belong to the
    token source. Errors raised by the source propagate unchanged.
    """

    def __init__(
        self,
        config: Optional[DecoderConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or DecoderConfig()
        self._logger = get_logger(__name__, correlation_id, "node_decoder")

    def decode(self, source: Iterable[Token]) -> Nodes:
        """Decode every token of ``source`` into a node sequence.

        Running out of tokens is a normal end, even inside an element.

        Args:
            source: Token source, typically a ``MarkupTokenizer``

        Returns:
            The decoded document as a ``Nodes`` tuple
        """
        tokens = iter(source)
        nodes: List[Node] = []
        for token in tokens:
            nodes.append(self.decode_token(tokens, token))

        self._logger.debug("Decoding completed", extra={"node_count": len(nodes)})
        return tuple(nodes)

    def decode_token(self, source: Iterator[Token], token: Any) -> Node:
        """Decode one node starting at an already fetched token.

        If ``token`` starts an element, the whole element is consumed from
        ``source``, including its end token. ``source`` must be the iterator
        ``token`` was taken from; a list or other re-iterable would restart
        from its first token.

        Raises:
            DecodeTokenError: ``token`` is not a token that starts a node
            TypeError: ``source`` is not an iterator
        """
        if iter(source) is not source:
            raise TypeError(
                f"source must be a token iterator, not {type(source).__name__}"
            )
        if isinstance(token, Token) and token.type is TokenType.START_ELEMENT:
            return self._decode_element(source, token)
        return self._decode_leaf(token)

    def _decode_leaf(self, token: Any) -> Node:
        if not isinstance(token, Token):
            raise DecodeTokenError(token)

        if token.type is TokenType.PROCESSING_INSTRUCTION:
            return Pi(token.target, token.value)
        if token.type is TokenType.DIRECTIVE:
            return Decl(token.value)
        if token.type is TokenType.COMMENT:
            return Comment(token.value)
        if token.type is TokenType.CHAR_DATA:
            return Text(token.value)
        raise DecodeTokenError(token)

    def _decode_element(self, tokens: Iterator[Token], start: Token) -> Elem:
        stack = [_OpenElement(start.name, start.attrs)]
        self._check_depth(1)

        for token in tokens:
            if isinstance(token, Token) and token.type is TokenType.END_ELEMENT:
                elem = stack.pop().close()
                if not stack:
                    return elem
                stack[-1].nodes.append(elem)
            elif isinstance(token, Token) and token.type is TokenType.START_ELEMENT:
                stack.append(_OpenElement(token.name, token.attrs))
                self._check_depth(len(stack))
            else:
                stack[-1].nodes.append(self._decode_leaf(token))

        # The source ended without the matching end tokens
        self._logger.warning(
            "Token source ended inside an element; closing open elements",
            extra={"open_elements": len(stack), "element": stack[0].name.local},
        )
        while len(stack) > 1:
            elem = stack.pop().close()
            stack[-1].nodes.append(elem)
        return stack[0].close()

    def _check_depth(self, depth: int) -> None:
        max_depth = self.config.max_depth
        if max_depth is not None and depth > max_depth:
            raise DepthLimitError(depth, max_depth)


def decode(
    source: Iterable[Token],
    config: Optional[DecoderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Nodes:
    """Decode a token source into a node sequence.

    Examples:
        >>> from xml_nodes.tokenization import MarkupTokenizer
        >>> decode(MarkupTokenizer('<one two="three"/>'))
        (Elem(name=Name(space='', local='one'), attrs=(Attr(name=Name(space='', local='two'), value='three'),), nodes=()),)
    """
    return NodeDecoder(config, correlation_id).decode(source)


def decode_token(
    source: Iterator[Token],
    token: Any,
    config: Optional[DecoderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Node:
    """Decode the single node that starts at ``token``."""
    return NodeDecoder(config, correlation_id).decode_token(source, token)
