"""Common components shared across SemTreeLib.

This internal package holds configuration classes and helpers that both
the core and the adapters depend on. It should NOT be imported directly
by users; the public names are re-exported from ``semtreelib``.

Important: This package must NEVER import from pipeline or adapters to
avoid circular dependencies.
"""

from .config import (
    Configuration,
    FormattingConfig,
    create_config,
    deep_merge,
    get_global_defaults,
    merge_global_defaults,
    normalize_overrides,
    reset_global_defaults,
    validate_config,
)

__all__ = [
    'Configuration',
    'FormattingConfig',
    'create_config',
    'deep_merge',
    'get_global_defaults',
    'merge_global_defaults',
    'normalize_overrides',
    'reset_global_defaults',
    'validate_config',
]
