"""Value transforms for the map stage.

A transform is a function taking an XNode and returning an XNode. The
stock transforms return a shallow copy of their input: the copy shares
the original ``children`` list, so map() still recurses into the
original children, while ``value`` and ``attributes`` are replaced on
the copy only. The input node is never modified.

Example:
    >>> pipeline.map(compose(regex(r"/\\s+/g", " "), to_number(precision=2)))
"""

from dataclasses import replace
from typing import Callable, List, Optional

from ..core.node import Primitive, XNode, XNodeAttribute

Transform = Callable[[XNode], XNode]


def compose(*transforms: Transform) -> Transform:
    """Chain transforms left to right.

    With no transforms the identity is returned; with one, that
    transform itself. Errors raised by any transform propagate.
    """
    if not transforms:
        return lambda node: node
    if len(transforms) == 1:
        return transforms[0]

    def _composed(node: XNode) -> XNode:
        for transform in transforms:
            node = transform(node)
        return node

    return _composed


def apply_to_primitives(node: XNode,
                        convert: Callable[[Primitive], Optional[Primitive]],
                        transform_value: bool = True,
                        transform_attributes: bool = True) -> XNode:
    """Return a copy of node with convert applied to its value and attributes.

    convert returns the new primitive, or None to leave a value as it is.
    """
    result = replace(node)

    if transform_value and node.value is not None:
        converted = convert(node.value)
        if converted is not None:
            result.value = converted

    if transform_attributes and node.attributes is not None:
        attributes: List[XNodeAttribute] = []
        for attr in node.attributes:
            converted = convert(attr.value) if attr.value is not None else None
            attributes.append(replace(attr, value=converted) if converted is not None else replace(attr))
        result.attributes = attributes

    return result


from .number import to_number  # noqa: E402
from .boolean import to_boolean  # noqa: E402
from .regex import regex  # noqa: E402

__all__ = [
    'Transform',
    'apply_to_primitives',
    'compose',
    'regex',
    'to_boolean',
    'to_number',
]
