"""Numeric conversion transform."""

import re
from typing import Optional, Union

from . import Transform, apply_to_primitives
from ..core.node import Primitive

Number = Union[int, float]


def to_number(precision: Optional[int] = None,
              decimal_separator: str = ".",
              thousands_separator: str = ",",
              integers: bool = True,
              decimals: bool = True,
              scientific: bool = True,
              transform_value: bool = True,
              transform_attributes: bool = True) -> Transform:
    """Create a transform converting numeric strings to numbers.

    Strings that are not recognised as numbers are left unchanged, as are
    booleans. Values that already are numbers only get precision applied.

    Args:
        precision: Decimal places to round to (None keeps full precision)
        decimal_separator: Character separating the fractional part
        thousands_separator: Digit-group separator ("" to disallow);
            ignored when equal to decimal_separator
        integers: Accept integers such as "42" or "1,234"
        decimals: Accept decimals such as "3.14" or ".5"
        scientific: Accept exponents such as "1e-3"
        transform_value: Convert the node's value
        transform_attributes: Convert the node's attribute values

    Example:
        >>> to_number(decimal_separator=",", thousands_separator=".")
    """
    pattern = _build_pattern(decimal_separator, thousands_separator,
                             integers, decimals, scientific)
    group_sep = "" if thousands_separator == decimal_separator else thousands_separator

    def _convert(value: Primitive) -> Optional[Number]:
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return _round(value, precision)
        if not isinstance(value, str) or pattern is None:
            return None

        text = value.strip()
        if not text or not pattern.match(text):
            return None

        if group_sep:
            text = text.replace(group_sep, "")
        if decimal_separator != ".":
            text = text.replace(decimal_separator, ".")

        if re.fullmatch(r"-?\d+", text):
            parsed: Number = int(text)
        else:
            parsed = float(text)
        return _round(parsed, precision)

    def _transform(node):
        return apply_to_primitives(node, _convert, transform_value, transform_attributes)

    return _transform


def _round(value: Number, precision: Optional[int]) -> Number:
    if precision is None or isinstance(value, int):
        return value
    return round(value, precision)


def _build_pattern(decimal_separator: str,
                   thousands_separator: str,
                   integers: bool,
                   decimals: bool,
                   scientific: bool) -> Optional["re.Pattern"]:
    group_sep = "" if thousands_separator == decimal_separator else thousands_separator
    dec = re.escape(decimal_separator)
    grp = re.escape(group_sep)

    alternatives = []
    if integers:
        if group_sep:
            alternatives.append(rf"-?(?:\d{{1,3}}(?:{grp}\d{{3}})*|\d+)")
        else:
            alternatives.append(r"-?\d+")
    if decimals:
        if group_sep:
            alternatives.append(rf"-?(?:\d{{1,3}}(?:{grp}\d{{3}})*|\d*){dec}\d+")
        else:
            alternatives.append(rf"-?\d*{dec}\d+")
    if scientific:
        alternatives.append(rf"-?(?:\d+(?:{dec}\d+)?|\d*{dec}\d+)[eE][+-]?\d+")

    if not alternatives:
        return None
    return re.compile(r"^(?:" + "|".join(alternatives) + r")$")
