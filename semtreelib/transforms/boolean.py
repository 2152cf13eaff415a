"""Boolean conversion transform."""

from typing import Iterable, Optional

from . import Transform, apply_to_primitives
from ..core.node import Primitive

DEFAULT_TRUE_VALUES = ("true", "yes", "1", "on")
DEFAULT_FALSE_VALUES = ("false", "no", "0", "off")


def to_boolean(true_values: Iterable[str] = DEFAULT_TRUE_VALUES,
               false_values: Iterable[str] = DEFAULT_FALSE_VALUES,
               transform_value: bool = True,
               transform_attributes: bool = True) -> Transform:
    """Create a transform converting boolean-like strings to booleans.

    Matching ignores case and surrounding whitespace. Booleans pass
    through; anything else is left unchanged.

    Args:
        true_values: Strings meaning True
        false_values: Strings meaning False
        transform_value: Convert the node's value
        transform_attributes: Convert the node's attribute values
    """
    truthy = {value.lower() for value in true_values}
    falsy = {value.lower() for value in false_values}

    def _convert(value: Primitive) -> Optional[bool]:
        if isinstance(value, bool):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        if not normalized:
            return None
        if normalized in truthy:
            return True
        if normalized in falsy:
            return False
        return None

    def _transform(node):
        return apply_to_primitives(node, _convert, transform_value, transform_attributes)

    return _transform
