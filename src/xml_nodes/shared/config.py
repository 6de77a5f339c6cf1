"""Configuration classes for XML node conversion.

Each component gets a small dataclass validated in ``__post_init__``; they are
combined into the immutable ``CodecConfig`` handed to the high-level API.
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Dict, List, Optional


@dataclass
class TokenizerConfig:
    """Configuration for the reference markup tokenizer."""

    # Reject mismatched end tags, unknown entities, unbound prefixes and
    # elements left open at end of input
    strict: bool = True
    normalize_line_endings: bool = True


@dataclass
class DecoderConfig:
    """Configuration for token-to-tree decoding."""

    max_depth: Optional[int] = None  # None means unbounded

    def __post_init__(self) -> None:
        """Validate decoder configuration."""
        if self.max_depth is not None and self.max_depth <= 0:
            raise ValueError("max_depth must be > 0 or None")


@dataclass
class JsonConfig:
    """Formatting options consumed by the JSON serializer."""

    indent: Optional[int] = 2  # None gives compact output
    ensure_ascii: bool = False

    def __post_init__(self) -> None:
        """Validate JSON configuration."""
        if self.indent is not None and self.indent < 0:
            raise ValueError("indent must be >= 0 or None")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


_COMPONENTS = ("tokenizer", "decoder", "json")


@dataclass(frozen=True)
class CodecConfig:
    """Complete configuration for markup and JSON conversion.

    Frozen so a single instance can be shared between callers; use
    ``override`` to derive variants.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)
    json: JsonConfig = field(default_factory=JsonConfig)

    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Re-run component validation so mutated components are caught."""
        for name in _COMPONENTS:
            component = getattr(self, name)
            post_init = getattr(component, "__post_init__", None)
            if post_init is None:
                continue
            try:
                post_init()
            except ValueError as e:
                raise ConfigValidationError(str(e), field_name=name) from e

    def override(self, **kwargs: Any) -> "CodecConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; component fields use ``component__field``

        Returns:
            New CodecConfig instance with overrides applied

        Example:
            >>> config = CodecConfig().override(
            ...     tokenizer__strict=False,
            ...     json__indent=None,
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=[f"Use one of {', '.join(_COMPONENTS)}"],
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for component, overrides in nested_overrides.items():
            try:
                new_fields[component] = replace(getattr(self, component), **overrides)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for config_field in fields(self):
            value = getattr(self, config_field.name)
            if is_dataclass(value):
                value = {f.name: getattr(value, f.name) for f in fields(value)}
            result[config_field.name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodecConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than silently dropped.
        """
        component_types = {
            "tokenizer": TokenizerConfig,
            "decoder": DecoderConfig,
            "json": JsonConfig,
        }
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in component_types:
                try:
                    values[key] = component_types[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key == "correlation_id":
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration field: {key}", field_name=key
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "CodecConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def strict(cls) -> "CodecConfig":
        """Preset that rejects any malformed markup."""
        return cls(tokenizer=TokenizerConfig(strict=True))

    @classmethod
    def lenient(cls) -> "CodecConfig":
        """Preset that tolerates sloppy markup, such as truncated documents."""
        return cls(tokenizer=TokenizerConfig(strict=False))
