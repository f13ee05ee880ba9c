"""Configuration classes for markup parsing and live tree behavior.

This module provides configuration objects for the parser, the live tree,
and the API layer, enabling control over strictness and identifier
generation.
"""

import hashlib
import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

SECTION_NAMES = ("parser", "tree", "api", "global_")

# Attribute holding the literal text of plain leaves
RESERVED_TEXT_ATTRIBUTE = "text"


@dataclass
class ParserConfig:
    """Configuration for the tag tokenizer, children scanner and tree parser."""

    # End of input before a close tag: implicit close when False
    strict_close_tags: bool = False
    max_depth: int = 256

    def __post_init__(self) -> None:
        """Validate parser configuration."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")


@dataclass
class TreeConfig:
    """Configuration for live tree identifier assignment."""

    id_attribute: str = "id"
    id_digest_length: int = 6
    id_hash_algorithm: str = "blake2b"

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not self.id_attribute:
            raise ValueError("id_attribute cannot be empty")
        if not (1 <= self.id_digest_length <= 32):
            raise ValueError("id_digest_length must be between 1 and 32")
        if self.id_hash_algorithm not in hashlib.algorithms_guaranteed:
            raise ValueError(
                f"id_hash_algorithm must be one of "
                f"{sorted(hashlib.algorithms_guaranteed)}"
            )
        if self.id_hash_algorithm.startswith("shake_"):
            raise ValueError("id_hash_algorithm must have a fixed digest size")


@dataclass
class ApiConfig:
    """Configuration for API layer behavior."""

    # Capture parse errors into the result instead of raising
    never_fail_mode: bool = False
    include_diagnostic_info: bool = True
    warn_on_trailing_content: bool = True
    assign_ids_on_build: bool = True


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class MarkupTreeConfig:
    """Complete configuration for all markup-tree components.

    Immutable aggregate of the parser, tree, API and global sections. Use
    ``override`` to derive a modified copy.
    """

    parser: ParserConfig = field(default_factory=ParserConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    # Metadata
    version: str = "1.0.0"
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.parser.__post_init__()
            self.tree.__post_init__()
            self.global_.__post_init__()
            self._validate_cross_component_dependencies()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def _validate_cross_component_dependencies(self) -> None:
        """Validate dependencies between different sections."""
        if self.tree.id_attribute == RESERVED_TEXT_ATTRIBUTE:
            raise ConfigValidationError(
                f"tree.id_attribute cannot be {RESERVED_TEXT_ATTRIBUTE!r}",
                field_name="tree.id_attribute",
                suggestions=["Keep the default id attribute 'id'"]
            )

    def override(self, **kwargs: Any) -> "MarkupTreeConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override,
                using ``section__field`` notation for nested fields

        Returns:
            New MarkupTreeConfig instance with overrides applied

        Example:
            >>> config = MarkupTreeConfig()
            >>> strict = config.override(parser__strict_close_tags=True)
            >>> strict.parser.strict_close_tags
            True
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            # Match by prefix, "global___x" would split wrong
            section = next(
                (name for name in SECTION_NAMES if key.startswith(f"{name}__")),
                None
            )
            if section is not None:
                field_name = key[len(section) + 2:]
                nested_overrides.setdefault(section, {})[field_name] = value
            elif "__" in key:
                raise ConfigValidationError(
                    f"Unknown configuration section: {key.split('__', 1)[0]}",
                    field_name=key,
                    suggestions=[f"Use one of {list(SECTION_NAMES)}"]
                )
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for section in SECTION_NAMES:
                current = getattr(self, section)
                if section in nested_overrides:
                    new_fields[section] = replace(current, **nested_overrides[section])
                else:
                    new_fields[section] = current

            for key, value in nested_overrides.items():
                if key not in SECTION_NAMES:
                    new_fields[key] = value

            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary representation of the configuration
        """
        def _dataclass_to_dict(obj: Any) -> Any:
            """Recursively convert dataclass to dict."""
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, (list, tuple, set)):
                return [_dataclass_to_dict(item) for item in obj]
            if isinstance(obj, dict):
                return {key: _dataclass_to_dict(value) for key, value in obj.items()}
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarkupTreeConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored; missing keys keep their defaults.

        Args:
            data: Dictionary containing configuration data

        Returns:
            MarkupTreeConfig instance created from dictionary
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            """Convert dict to dataclass instance."""
            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                field_type = field_info.type
                if hasattr(field_type, "__dataclass_fields__") and isinstance(value, dict):
                    field_values[field_name] = _dict_to_dataclass(value, field_type)
                else:
                    field_values[field_name] = value
            return target_class(**field_values)

        try:
            result = _dict_to_dataclass(data, cls)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration data: {e}") from e
        return result

    @classmethod
    def from_json(cls, json_str: str) -> "MarkupTreeConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def strict(cls) -> "MarkupTreeConfig":
        """Create preset that rejects unclosed tags and propagates errors."""
        return cls(
            parser=ParserConfig(strict_close_tags=True),
            api=ApiConfig(never_fail_mode=False),
            name="strict",
            description="Reject input that ends before every tag is closed"
        )

    @classmethod
    def lenient(cls) -> "MarkupTreeConfig":
        """Create preset that closes tags at end of input and never raises."""
        return cls(
            parser=ParserConfig(strict_close_tags=False),
            api=ApiConfig(never_fail_mode=True),
            name="lenient",
            description=(
                "Implicitly close tags at end of input and report parse "
                "errors as diagnostics"
            )
        )
