"""Pipeline context for SemTreeLib.

A PipelineContext travels with a pipeline session and carries its
configuration, a logger and namespaced metadata. Adapters record facts
about the data they read under their own namespace (for example
``json.original_type``) so that later stages and serializers can make
decisions based on where the tree came from.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ._common.config import Configuration, create_config, deep_merge, normalize_overrides
from .core.node import XNode, clone_node
from .errors import ValidationError


class PipelineContext:
    """Execution environment shared by every operation of a session.

    Attributes:
        config: Active Configuration
        logger: Logger used for operation and error messages
        metadata: Namespace -> {key: value} storage
    """

    def __init__(self,
                 config: Optional[Configuration] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config if config is not None else create_config()
        self.logger = logger or logging.getLogger("semtreelib.pipeline")
        self.metadata: Dict[str, Dict[str, Any]] = {}

    def clone_node(self, node: XNode, deep: bool = False) -> XNode:
        return clone_node(node, deep)

    def validate_input(self, condition: bool, message: str) -> None:
        """Fail-fast argument check.

        Raises:
            ValidationError: If condition is false (logged at ERROR first)
        """
        if not condition:
            self.logger.error(f"Validation failed: {message}")
            raise ValidationError(message)

    def merge_config(self, updates: Mapping[str, Any]) -> None:
        """Deep-merge a mapping of settings into the active configuration.

        Top-level keys that are not Configuration fields are treated as
        extension section names.

        Args:
            updates: Nested mapping, e.g. ``{"formatting": {"indent": 4}}``
        """
        merged = deep_merge(self.config.to_dict(), normalize_overrides(updates))
        self.config = Configuration.from_dict(merged)
        self.logger.debug(f"Configuration updated: {dict(updates)}")

    # --- Namespaced metadata ---

    def set_metadata(self, namespace: str, key: str, value: Any) -> None:
        self.metadata.setdefault(namespace, {})[key] = value
        self.logger.debug(f"Metadata set: {namespace}.{key} = {value!r}")

    def get_metadata(self, namespace: str, key: Optional[str] = None) -> Any:
        """Return one metadata value, or the whole namespace dict when key is None.

        Missing keys return None; a missing namespace returns an empty dict.
        """
        if key is None:
            return self.metadata.get(namespace, {})
        return self.metadata.get(namespace, {}).get(key)

    def has_metadata(self, namespace: str, key: Optional[str] = None) -> bool:
        """Check for a namespace with any entries, or for a specific key."""
        if key is None:
            return bool(self.metadata.get(namespace))
        return key in self.metadata.get(namespace, {})

    def clear_metadata(self, namespace: str, key: Optional[str] = None) -> None:
        """Remove one key, or the whole namespace when key is None."""
        if key is None:
            self.metadata.pop(namespace, None)
            self.logger.debug(f"Cleared all metadata for namespace: {namespace}")
        elif namespace in self.metadata:
            self.metadata[namespace].pop(key, None)
            self.logger.debug(f"Cleared metadata: {namespace}.{key}")

    # --- Logging helpers ---

    def log_operation(self, operation: str, **details: Any) -> None:
        if details:
            self.logger.debug(f"Operation: {operation} {details}")
        else:
            self.logger.debug(f"Operation: {operation}")

    def log_error(self, operation: str, error: BaseException) -> None:
        self.logger.error(f"Error in {operation}: {error}")
