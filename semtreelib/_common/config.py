"""Configuration system for SemTreeLib.

This module defines the settings shared by the pipeline and its adapters:
core preservation flags, output formatting, the name used for synthetic
result containers, and per-adapter extension sections.
"""

import copy
import logging
from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class FormattingConfig:
    """Output formatting used by serializing adapters."""

    indent: int = 2       # Spaces per indentation level
    pretty: bool = True   # Multi-line output vs compact


@dataclass
class Configuration:
    """Complete configuration for a pipeline session.

    The core only reads ``fragment_root``; the remaining settings are
    consumed by adapters. Adapter-specific options live in ``extensions``
    keyed by adapter name (e.g. ``"json"``).
    """

    # Preservation
    preserve_comments: bool = True
    preserve_instructions: bool = True
    preserve_whitespace: bool = False

    # Output
    formatting: FormattingConfig = field(default_factory=FormattingConfig)

    # Name of the synthetic container wrapping flattened results
    fragment_root: str = "results"

    # Per-adapter sections
    extensions: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def section(self, name: str) -> Dict[str, Any]:
        """Return the extension section for an adapter.

        Args:
            name: Adapter name (e.g. "json")

        Returns:
            The section dict, or an empty dict when absent
        """
        return self.extensions.get(name, {})

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as nested plain dicts."""
        return asdict(self)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        for flag in ("preserve_comments", "preserve_instructions", "preserve_whitespace"):
            if not isinstance(getattr(self, flag), bool):
                errors.append(f"{flag} must be a boolean")

        if not isinstance(self.formatting, FormattingConfig):
            errors.append("formatting must be a FormattingConfig")
        else:
            indent = self.formatting.indent
            if isinstance(indent, bool) or not isinstance(indent, int):
                errors.append("formatting.indent must be an integer")
            elif indent < 0:
                errors.append("formatting.indent cannot be negative")
            if not isinstance(self.formatting.pretty, bool):
                errors.append("formatting.pretty must be a boolean")

        if not isinstance(self.fragment_root, str) or not self.fragment_root.strip():
            errors.append("fragment_root must be a non-empty string")

        if not isinstance(self.extensions, dict):
            errors.append("extensions must be a dict")
        else:
            for name, section in self.extensions.items():
                if not isinstance(section, dict):
                    errors.append(f"extensions['{name}'] must be a dict")

        return errors

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Configuration':
        """Build a Configuration from a nested mapping.

        Unknown top-level keys are stored as extension sections.

        Raises:
            ValidationError: If ``formatting`` or ``extensions`` has the
                wrong shape or ``formatting`` names an unknown setting
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        extensions: Dict[str, Dict[str, Any]] = {}

        for key, value in data.items():
            if key == "formatting":
                kwargs[key] = _parse_formatting(value)
            elif key == "extensions":
                if not isinstance(value, Mapping):
                    raise ValidationError(
                        f"Invalid configuration: extensions must be a mapping, got {type(value).__name__}"
                    )
                for name, section in value.items():
                    if not isinstance(section, Mapping):
                        raise ValidationError(
                            f"Invalid configuration: extensions['{name}'] must be a mapping, "
                            f"got {type(section).__name__}"
                        )
                    extensions[name] = copy.deepcopy(dict(section))
            elif key in known:
                kwargs[key] = copy.deepcopy(value)
            else:
                extensions[key] = copy.deepcopy(value)

        return cls(extensions=extensions, **kwargs)


def _parse_formatting(value: Any) -> FormattingConfig:
    if isinstance(value, FormattingConfig):
        return value
    if not isinstance(value, Mapping):
        raise ValidationError(
            f"Invalid configuration: formatting must be a mapping, got {type(value).__name__}"
        )
    valid = [f.name for f in fields(FormattingConfig)]
    unknown = [key for key in value if key not in valid]
    if unknown:
        raise ValidationError(
            f"Invalid configuration: unknown formatting setting(s): {', '.join(map(str, unknown))}. "
            f"Choose from: {', '.join(valid)}"
        )
    return FormattingConfig(**value)


def validate_config(config: Configuration) -> Configuration:
    """Raise ValidationError if the configuration has any problems.

    Args:
        config: Configuration to check

    Returns:
        The same configuration, for chaining

    Raises:
        ValidationError: Listing every problem found
    """
    errors = config.validate()
    if errors:
        raise ValidationError("Invalid configuration: " + "; ".join(errors), errors)
    return config


def deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge overrides into a copy of base.

    Nested dicts are merged key by key; any other value replaces the
    existing one.
    """
    result = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


# Process-level defaults, extended by adapters as they are imported
_global_defaults: Dict[str, Any] = Configuration().to_dict()


def merge_global_defaults(section_defaults: Mapping[str, Mapping[str, Any]]) -> None:
    """Register default settings for one or more extension sections.

    Each section is merged shallowly over what is already registered
    under the same name.

    Args:
        section_defaults: Mapping of section name to default settings
    """
    extensions = _global_defaults.setdefault("extensions", {})
    for name, defaults in section_defaults.items():
        merged = dict(extensions.get(name, {}))
        merged.update(copy.deepcopy(dict(defaults)))
        extensions[name] = merged
        logger.debug(f"Registered default settings for section '{name}'")


def get_global_defaults() -> Dict[str, Any]:
    """Return a copy of the current process-level defaults."""
    return copy.deepcopy(_global_defaults)


def reset_global_defaults() -> None:
    """Restore the core defaults, dropping registered extension sections."""
    global _global_defaults
    _global_defaults = Configuration().to_dict()


def create_config(overrides: Optional[Mapping[str, Any]] = None) -> Configuration:
    """Create a configuration from the global defaults plus overrides.

    Args:
        overrides: Nested mapping of settings to change. Nested dicts merge
            into the defaults; unknown top-level keys become extension
            sections.

    Returns:
        A fresh Configuration

    Example:
        >>> config = create_config({"fragment_root": "matches",
        ...                         "json": {"array_strategy": "always"}})
    """
    merged = get_global_defaults()
    if overrides:
        merged = deep_merge(merged, normalize_overrides(overrides))
    return Configuration.from_dict(merged)


def normalize_overrides(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Shape a mapping of settings like Configuration.to_dict().

    Unknown top-level keys are moved under "extensions" and a
    FormattingConfig value is turned into a dict.
    """
    known = {f.name for f in fields(Configuration)}
    normalized: Dict[str, Any] = {}
    extensions: Dict[str, Any] = {}
    for key, value in overrides.items():
        if key == "extensions":
            if not isinstance(value, Mapping):
                raise ValidationError(
                    f"Invalid configuration: extensions must be a mapping, got {type(value).__name__}"
                )
            extensions.update(value)
        elif key in known:
            normalized[key] = asdict(value) if isinstance(value, FormattingConfig) else value
        else:
            extensions[key] = value
    if extensions:
        normalized["extensions"] = extensions
    return normalized
