"""Shared utilities for XML node conversion.

This module provides configuration objects, the error hierarchy and logging
helpers used across the tokenization, tree and API layers.
"""

from .config import (
    CodecConfig,
    ConfigError,
    ConfigValidationError,
    DecoderConfig,
    JsonConfig,
    TokenizerConfig,
)
from .errors import (
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
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "CodecConfig",
    "ConfigError",
    "ConfigValidationError",
    "DecoderConfig",
    "JsonConfig",
    "TokenizerConfig",
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
    "CorrelationLogger",
    "get_logger",
]
