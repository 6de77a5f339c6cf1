"""Exception hierarchy for decoding, encoding and JSON conversion of XML nodes.

Every error is first-failure-abort: nothing in the package retries, and any
partially built tree is discarded by the caller. Errors raised by
caller-supplied token sources and sinks are not wrapped.
"""

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from xml_nodes.tokenization.tokens import TokenPosition


class XMLNodesError(Exception):
    """Base exception for all xml_nodes errors."""


class DecodeError(XMLNodesError):
    """Base exception for token-to-tree decoding failures."""


class DecodeTokenError(DecodeError):
    """Raised when a token cannot be interpreted as a node."""

    def __init__(self, token: Any) -> None:
        super().__init__(f"unexpected XML token {token!r}")
        self.token = token


class DepthLimitError(DecodeError):
    """Raised when element nesting exceeds the configured maximum depth."""

    def __init__(self, depth: int, max_depth: int) -> None:
        super().__init__(
            f"element nesting depth {depth} exceeds maximum of {max_depth}"
        )
        self.depth = depth
        self.max_depth = max_depth


class TokenizationError(XMLNodesError):
    """Raised by the reference tokenizer on malformed markup."""

    def __init__(
        self, message: str, position: Optional["TokenPosition"] = None
    ) -> None:
        if position is not None:
            message = f"{message} (line {position.line}, column {position.column})"
        super().__init__(message)
        self.position = position


class EncodeError(XMLNodesError):
    """Base exception for tree-to-markup encoding failures."""


class EncodeNameError(EncodeError):
    """Raised when a node lacks the name required to encode it as markup."""


class MarkupWriteError(EncodeError):
    """Raised by the reference writer when a token cannot be serialized."""


class JsonCodecError(XMLNodesError, ValueError):
    """Base exception for malformed tagged JSON input."""


class JsonMissingDiscriminatorError(JsonCodecError):
    """Raised when a JSON node object has no "type" field."""

    def __init__(self, raw: str) -> None:
        super().__init__(f'required field "type" is missing in {raw!r}')
        self.raw = raw


class JsonUnknownDiscriminatorError(JsonCodecError):
    """Raised when a JSON node object has an unrecognized "type" value."""

    def __init__(self, value: str) -> None:
        super().__init__(f"unrecognized node type {value!r}")
        self.value = value


class JsonShapeError(JsonCodecError):
    """Raised when JSON fields do not match the shape of their node type."""


class JsonDepthError(JsonCodecError):
    """Raised when nesting exceeds what the ``json`` module can handle.

    Trees are converted to and from plain values without recursion, but
    ``json.dumps`` and ``json.loads`` still recurse once per nesting level.
    """

    def __init__(self, depth: Optional[int] = None) -> None:
        if depth is None:
            message = "JSON text is nested too deeply to decode"
        else:
            message = f"element nesting depth {depth} is too deep to serialize as JSON"
        super().__init__(message)
        self.depth = depth
