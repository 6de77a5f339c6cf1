"""Tree-to-token encoding.

Walks a node or node sequence and emits the equivalent tokens into a sink,
the inverse of ``decoder``. The tree itself is never modified.
"""

from typing import Iterable, Iterator, List, Optional, Union

from xml_nodes.shared.errors import EncodeNameError
from xml_nodes.shared.logging import get_logger
from xml_nodes.tokenization.tokens import Token, TokenSink

from .nodes import Comment, Decl, Elem, Name, Node, Pi, Text, is_node

EncodableType = Union[Node, Iterable[Node]]

_EXHAUSTED = object()


def _as_sequence(value: EncodableType) -> Iterable[Node]:
    if is_node(value):
        return (value,)  # type: ignore[return-value]
    if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
        raise TypeError(f"cannot encode {type(value).__name__} as XML nodes")
    return value  # type: ignore[return-value]


class NodeEncoder:
    """Emits the token stream equivalent to a node tree."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self._logger = get_logger(__name__, correlation_id, "node_encoder")

    def iter_tokens(self, value: EncodableType) -> Iterator[Token]:
        """Yield tokens for a node or node sequence in document order.

        Raises:
            EncodeNameError: An element has an empty local name or an
                instruction has an empty target
        """
        iterators: List[Iterator[Node]] = [iter(_as_sequence(value))]
        end_tokens: List[Optional[Token]] = [None]

        while iterators:
            node = next(iterators[-1], _EXHAUSTED)
            if node is _EXHAUSTED:
                iterators.pop()
                end_token = end_tokens.pop()
                if end_token is not None:
                    yield end_token
                continue

            if isinstance(node, Elem):
                start = self._start_token(node)
                yield start
                iterators.append(iter(node.nodes))
                end_tokens.append(Token.end_element(start.name))
            else:
                yield self._leaf_token(node)

    def encode(self, value: EncodableType, sink: TokenSink) -> int:
        """Encode a node or node sequence into ``sink``.

        All tokens are produced before the first write, so a tree that fails
        validation leaves the sink untouched.

        Returns:
            Number of tokens written
        """
        tokens = list(self.iter_tokens(value))
        for token in tokens:
            sink.write_token(token)

        self._logger.debug("Encoding completed", extra={"token_count": len(tokens)})
        return len(tokens)

    def _start_token(self, elem: Elem) -> Token:
        # A generic element must never serialize under a name of its own
        if not elem.name.local:
            raise EncodeNameError(f"cannot XML-encode {type(elem).__name__} with empty name")

        name = elem.name
        # Omit the namespace from the tag when the element already declares it
        # as the default; otherwise each decode/encode cycle adds an xmlns
        if name.space and elem.has_exact_attr("", "xmlns", name.space):
            name = Name("", name.local)
        return Token.start_element(name, elem.attrs)

    def _leaf_token(self, node: object) -> Token:
        if isinstance(node, Pi):
            if not node.target:
                raise EncodeNameError(
                    "cannot encode processing instruction with empty target"
                )
            return Token.processing_instruction(node.target, node.content)
        if isinstance(node, Decl):
            return Token.directive(node.content)
        if isinstance(node, Comment):
            return Token.comment(node.content)
        if isinstance(node, Text):
            return Token.char_data(node.content)
        raise TypeError(f"cannot encode {type(node).__name__} as an XML node")


def iter_tokens(value: EncodableType) -> Iterator[Token]:
    """Yield the tokens for a node or node sequence."""
    return NodeEncoder().iter_tokens(value)


def encode(
    value: EncodableType, sink: TokenSink, correlation_id: Optional[str] = None
) -> int:
    """Encode a node or node sequence into ``sink``."""
    return NodeEncoder(correlation_id).encode(value, sink)
